from pathlib import Path
from typing import Dict, List, Any, Optional, Union


class MalformedCSVError(IOError):
    """Raised when a delimited file cannot be decoded or a row has the wrong width."""


def try_convert_type(value: str) -> Union[int, float, None, str]:
    # Empty cell -> None, otherwise int, float or the raw text
    if value == '':
        return None
    try:
        return int(value)
    except ValueError:
        try:
            return float(value)
        except ValueError:
            return value


def _split_csv_line(line: str, sep: str = ',') -> List[str]:
    # Split CSV line handling quotes and escaped quotes
    out = []
    cur = []
    in_quotes = False
    i = 0
    n = len(line)

    while i < n:
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < n and line[i + 1] == '"':
                cur.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
            i += 1
            continue
        if ch == sep and not in_quotes:
            out.append(''.join(cur))
            cur = []
            i += 1
            continue
        cur.append(ch)
        i += 1

    out.append(''.join(cur))
    return out


def custom_csv_parser(file_path: Union[str, Path], separator: str = ',') -> Dict[str, List[Any]]:
    path = Path(file_path) if not isinstance(file_path, Path) else file_path

    if not path.exists():
        raise FileNotFoundError(f"File {path} not found")

    if path.stat().st_size == 0:
        return {}

    data = {}
    try:
        with open(path, 'r', encoding='utf-8', newline='') as f:
            header_line = f.readline().lstrip('\ufeff').rstrip('\r\n')
            headers = _split_csv_line(header_line, separator)
            for h in headers:
                data[h] = []

            for line_no, raw in enumerate(f, start=2):
                line = raw.rstrip('\r\n')
                if not line:
                    continue
                values = _split_csv_line(line, separator)

                if len(values) != len(headers):
                    raise MalformedCSVError(
                        f"{path}: line {line_no} has {len(values)} fields, expected {len(headers)}"
                    )

                for h, v in zip(headers, values):
                    data[h].append(try_convert_type(v))
    except UnicodeDecodeError as e:
        raise MalformedCSVError(f"{path}: not valid UTF-8 ({e.reason})") from e
    return data


def to_float_or_none(x: Any) -> Optional[float]:
    # Convert to float or return None
    try:
        return float(x)
    except (TypeError, ValueError):
        return None
