"""
Test related utilities
"""
import contextlib
import os
import pathlib
import shutil
import tempfile
from typing import List

from tputfmt.resolver import Attribute, Resolver


def has_executable(executable: str) -> bool:
    return shutil.which(executable) is not None


class MockedCommand:
    """Records the arguments of every invocation of a mocked command"""

    def __init__(self, calllog: pathlib.Path):
        self._calllog = calllog

    @property
    def call_args_list(self) -> List[List[str]]:
        if not self._calllog.exists():
            return []
        data = self._calllog.read_bytes().decode("utf8")
        calls = []
        for record in data.split("\x1e")[:-1]:
            calls.append(record.split("\0")[:-1])
        return calls


@contextlib.contextmanager
def mock_command(cmd_name: str, script: str):
    """
    mock_command creates a mocked binary with the given :cmd_name: and :script:
    content, placed first in PATH. The yielded object records the arguments
    of every call in `call_args_list`.
    """
    original_path = os.environ["PATH"]
    with tempfile.TemporaryDirectory() as tmpdir:
        calllog = pathlib.Path(tmpdir) / "calllog"
        real = pathlib.Path(tmpdir) / f"{cmd_name}.real"
        real.write_text(script, encoding="utf8")
        wrapper = pathlib.Path(tmpdir) / cmd_name
        wrapper.write_text(
            "#!/bin/sh\n"
            f"if [ \"$#\" -gt 0 ]; then printf '%s\\0' \"$@\" >> '{calllog}'; fi\n"
            f"printf '\\036' >> '{calllog}'\n"
            f"exec /bin/sh '{real}' \"$@\"\n",
            encoding="utf8")
        wrapper.chmod(0o755)
        os.environ["PATH"] = f"{tmpdir}:{original_path}"
        try:
            yield MockedCommand(calllog)
        finally:
            os.environ["PATH"] = original_path


class FakeResolver(Resolver):
    """Resolver returning readable markers instead of escape sequences

    Colors resolve to `<setaf N>` / `<setab N>`, attributes to `<capname>`.
    Every call is recorded in `calls`.
    """

    name = "fake"

    def __init__(self, colors: int = 256, available: bool = True):
        self._colors = colors
        self._available = available
        self.calls: List[tuple] = []

    def colors(self) -> int:
        self.calls.append(("colors",))
        return self._colors

    def set_foreground(self, index: int) -> str:
        self.calls.append(("setaf", index))
        return f"<setaf {index}>"

    def set_background(self, index: int) -> str:
        self.calls.append(("setab", index))
        return f"<setab {index}>"

    def attribute(self, attr: Attribute) -> str:
        self.calls.append((attr.capname,))
        if not self._available:
            return ""
        return f"<{attr.capname}>"

    @property
    def available(self) -> bool:
        return self._available

    def count(self, *call) -> int:
        return self.calls.count(call)
