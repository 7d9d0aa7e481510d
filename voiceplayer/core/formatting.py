import math

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")

def format_time(seconds: float | int | None) -> str:
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        seconds = 0
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"

def format_file_size(size_bytes: int | None) -> str:
    if not size_bytes or size_bytes <= 0:
        return "0 Bytes"
    value = float(size_bytes)
    i = 0
    while value >= 1024 and i < len(_SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    # "1.5 MB", "2 KB": trailing zeros dropped
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[i]}"
