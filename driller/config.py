from typing import Dict, Mapping, Optional
from dataclasses import dataclass
import codecs
import os

################################################################################
# Config
################################################################################

_BOOLEANS: Dict[str, bool] = {
    "1": True, "true": True, "yes": True, "on": True,
    "0": False, "false": False, "no": False, "off": False,
}

_DECODE_ERRORS = ('strict', 'replace', 'ignore', 'backslashreplace', 'surrogateescape')


@dataclass(frozen=True)
class DrillerConfig:
    # Blob contents are decoded with these before being returned as source code.
    encoding: str = 'utf-8'
    decode_errors: str = 'replace'

    # Passed to `git diff` when formatting a single file's change.
    detect_renames: bool = True
    context_lines: int = 3

    def __post_init__(self):
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ValueError(f"Unknown encoding: {self.encoding}")
        if self.decode_errors not in _DECODE_ERRORS:
            raise ValueError(f"Invalid decode error handler: {self.decode_errors}")
        if self.context_lines < 0:
            raise ValueError(f"Context lines must be non-negative, got {self.context_lines}")

    def decode(self, data: bytes) -> str:
        return data.decode(self.encoding, errors=self.decode_errors)

    def diff_options(self) -> Dict[str, bool | int]:
        """Keyword options for `repo.git.diff`."""
        options: Dict[str, bool | int] = {"unified": self.context_lines}
        if self.detect_renames:
            options["find_renames"] = True
        else:
            # git detects renames by default since 2.9
            options["no_renames"] = True
        return options


def _parse_bool(name: str, value: str) -> bool:
    try:
        return _BOOLEANS[value.strip().lower()]
    except KeyError:
        raise ValueError(f"Invalid boolean for {name}: {value!r}")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise ValueError(f"Invalid integer for {name}: {value!r}")


def load_config(environ: Optional[Mapping[str, str]] = None) -> DrillerConfig:
    """
    Builds the config from DRILLER_* environment variables, falling back to
    the dataclass defaults for anything unset.
    """
    if environ is None:
        environ = os.environ

    defaults = DrillerConfig()
    encoding = environ.get("DRILLER_ENCODING", defaults.encoding)
    decode_errors = environ.get("DRILLER_DECODE_ERRORS", defaults.decode_errors)

    detect_renames = defaults.detect_renames
    if "DRILLER_DETECT_RENAMES" in environ:
        detect_renames = _parse_bool("DRILLER_DETECT_RENAMES", environ["DRILLER_DETECT_RENAMES"])

    context_lines = defaults.context_lines
    if "DRILLER_CONTEXT_LINES" in environ:
        context_lines = _parse_int("DRILLER_CONTEXT_LINES", environ["DRILLER_CONTEXT_LINES"])

    return DrillerConfig(
        encoding=encoding,
        decode_errors=decode_errors,
        detect_renames=detect_renames,
        context_lines=context_lines,
    )
