import io

from yaml_cassette_store import ScanState, read_raw_record, is_marker_line

REC_A = b"- request: a\n  response: 1\n"
REC_B = b"- request: b\n"
REC_C = b"- request: c\n"


def make_source(data: bytes) -> io.BytesIO:
    return io.BytesIO(data)


def test_marker_lines():
    assert is_marker_line(b"- request: a\n")
    assert is_marker_line(b"-\n")
    assert is_marker_line(b"-")
    assert is_marker_line(b"-\trequest: a\n")
    assert not is_marker_line(b"---\n")
    assert not is_marker_line(b"  - nested\n")
    assert not is_marker_line(b"-1\n")
    assert not is_marker_line(b"\n")


def test_reads_records_in_order_and_stops_at_next_marker():
    fh = make_source(REC_A + REC_B + REC_C)
    st = ScanState()

    assert read_raw_record(fh, st) == REC_A.decode()
    assert st.latest_byte_position == 0
    assert fh.tell() == len(REC_A)
    assert st.eof is False

    assert read_raw_record(fh, st) == REC_B.decode()
    assert st.latest_byte_position == len(REC_A)
    assert fh.tell() == len(REC_A) + len(REC_B)

    assert read_raw_record(fh, st) == REC_C.decode()
    assert st.eof is True

    assert read_raw_record(fh, st) == ""
    assert st.eof is True


def test_empty_file_yields_empty_text():
    st = ScanState()
    assert read_raw_record(make_source(b""), st) == ""
    assert st.eof is True
    assert st.latest_byte_position is None


def test_start_mid_record_resumes_at_following_record():
    fh = make_source(REC_A + REC_B)
    st = ScanState()
    assert read_raw_record(fh, st, start_byte=3) == REC_B.decode()
    assert st.latest_byte_position == len(REC_A)


def test_start_exactly_at_marker_line():
    fh = make_source(REC_A + REC_B + REC_C)
    st = ScanState()
    offset = len(REC_A) + len(REC_B)
    assert read_raw_record(fh, st, start_byte=offset) == REC_C.decode()
    assert st.latest_byte_position == offset


def test_start_at_end_of_file():
    data = REC_A + REC_B
    fh = make_source(data)
    st = ScanState()
    assert read_raw_record(fh, st, start_byte=len(data)) == ""
    assert st.eof is True


def test_explicit_offset_zero_seeks_back_to_start():
    fh = make_source(REC_A + REC_B)
    st = ScanState()
    fh.seek(len(REC_A))
    assert read_raw_record(fh, st, start_byte=0) == REC_A.decode()


def test_nested_sequences_stay_inside_record():
    rec = b"- request: a\n  headers:\n  - x\n  - y\n"
    fh = make_source(b"\n" + rec + REC_B)
    st = ScanState()
    assert read_raw_record(fh, st) == rec.decode()
    assert st.latest_byte_position == 1
    assert read_raw_record(fh, st) == REC_B.decode()


def test_multibyte_content_keeps_byte_offsets_exact():
    first = "- request: привет\n".encode("utf-8")
    fh = make_source(first + REC_B)
    st = ScanState()
    assert read_raw_record(fh, st) == first.decode("utf-8")
    assert fh.tell() == len(first)
    read_raw_record(fh, st)
    assert st.latest_byte_position == len(first)
