#!/usr/bin/env python3
# Example usage of yaml_cassette_store: record two interactions, then play them back.

import logging

from yaml_cassette_store import RecordStore


def progress_printer(evt):
    phase = evt.get("phase")
    pct = int(evt.get("pct", 0))
    last = getattr(progress_printer, "_last", {})
    prev = last.get(phase, -1)
    if pct == 100 or pct - prev >= 5 or prev == -1:
        msg = evt.get("msg", "")
        line = f"[progress] {phase} {pct}%"
        if msg:
            line += f" - {msg}"
        print(line, flush=True)
        last[phase] = pct
        progress_printer._last = last


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Create/open the cassette file. '+' means read/write; 'r' is playback only.
    with RecordStore("demo_cassette.yml", mode="+", on_progress=progress_printer) as cassette:
        if cassette.is_new:
            cassette.append({
                "request": {"method": "GET", "url": "http://example.com/a"},
                "response": {"status": {"code": 200}, "body": "alpha"},
            })
            cassette.append({
                "request": {"method": "GET", "url": "http://example.com/b"},
                "response": {"status": {"code": 404}, "body": ""},
            })

        # External iteration, as a playback harness drives it
        cassette.rewind()
        while cassette.valid():
            rec = cassette.current()
            print(cassette.key(), rec["request"]["url"], "->", rec["response"]["status"]["code"])
            cassette.next()

        # Index metadata without decoding full records again
        for entry in cassette.entries:
            print("indexed", entry.request["url"], "at byte", entry.byte_pos)


if __name__ == "__main__":
    main()
