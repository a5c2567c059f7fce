# -*- coding: utf-8 -*-

import datetime
import io
import os
import typing


__all__ = ['LogFile', 'open_log']


class LogFile(io.TextIOBase):
    __slots__ = ('_file', '_tag', '_newline')

    def __init__(self, file: typing.Union[io.TextIOBase, typing.IO[str]], *, tag: str = ''):
        super().__init__()
        if file.closed:
            # probably not a very useful state
            super().close()
        self._file = file
        # every adapter process appends to the same file; tag lines with the pid
        self._tag = tag or f"[{os.getpid()}]"
        # whether next write should start a new line, i.e. prepend timestamp
        self._newline = True

    def close(self) -> None:
        if not self.closed:
            self.flush()
            super().close()
            self._file.close()

    def writable(self) -> bool:
        return True

    def _write_line_part(self, /, line_part: str) -> None:
        # line_part musn't contain a newline, it only is allowed to end
        # with a newline
        if not line_part:
            return
        if self._newline:
            ts = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self._file.write(f"{ts} {self._tag} {line_part}")
        else:
            self._file.write(line_part)
        self._newline = line_part.endswith('\n')

    def write(self, /, data: str) -> int:
        lines = data.split('\n')
        for line in lines[:-1]:
            # all but the final line had a terminating '\n' in the input
            self._write_line_part(line + '\n')
        if lines[-1]:
            self._write_line_part(lines[-1])
        return len(data)

    def flush(self) -> None:
        if not self._file.closed:
            self._file.flush()


def open_log(path: str) -> LogFile:
    # line buffered; the process image is usually replaced right after the last line
    return LogFile(open(path, "a", buffering=1, encoding="utf-8", errors="backslashreplace"))
