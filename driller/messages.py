from typing import List, Tuple

###############################################################################
# Output prefixes
###############################################################################

try:
    from termcolor import colored
    CROSSMARK    = '[' + colored("✗", "red") + ']'
    QUESTIONMARK = '[' + colored("?", "yellow") + ']'
    INFOMARK     = '[' + colored("i", "blue") + ']'
    ADDED_MARK   = colored("+", "green")
    DELETED_MARK = colored("-", "red")
except ImportError:
    CROSSMARK    = "[✗]"
    QUESTIONMARK = "[?]"
    INFOMARK     = "[i]"
    ADDED_MARK   = "+"
    DELETED_MARK = "-"

def _message(prefix: str, raw_prefix: str, *args):
    msg = '\n'.join(str(arg) for arg in args)
    first = True
    for line in msg.split('\n'):
        if first: print(f"{prefix} {line}")
        else:     print(f"{' ' * len(raw_prefix)} {line}")
        first = False

# Use CROSSMARK for errors
def error(*msg): _message(CROSSMARK, '[✗]', *msg)

# Use QUESTIONMARK for warnings
def warning(*msg): _message(QUESTIONMARK, '[?]', *msg)

# Use INFOMARK for information
def info(*msg): _message(INFOMARK, '[i]', *msg)

###############################################################################
# Diff lines
###############################################################################

def format_numbered_lines(mark: str, lines: List[Tuple[int, str]]) -> List[str]:
    if not lines:
        return []
    width = len(str(max(number for number, _ in lines)))
    return [f"{mark} {number:>{width}} | {content}" for number, content in lines]

def added(lines: List[Tuple[int, str]]) -> None:
    for line in format_numbered_lines(ADDED_MARK, lines):
        print(line)

def deleted(lines: List[Tuple[int, str]]) -> None:
    for line in format_numbered_lines(DELETED_MARK, lines):
        print(line)
