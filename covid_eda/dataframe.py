from typing import List, Dict, Any, Tuple, Optional, Iterable, Union


class SchemaError(ValueError):
    """Raised when a requested column is absent from a DataFrame."""


def _sort_key(value: Any) -> Tuple[bool, bool, Any]:
    # Numbers, then text, then None; values of different kinds are never compared
    return (value is None, isinstance(value, str), value if value is not None else 0)


class GroupBy:
    def __init__(self, df: 'DataFrame', keys: List[str], sort: bool = False):
        if not keys:
            raise ValueError("Must provide at least one key for grouping.")

        missing = [k for k in keys if k not in df.columns]
        if missing:
            raise SchemaError(f"GroupBy keys not found: {missing}. Available: {df.columns}")

        self.df = df
        self.keys = keys
        self.groups: Dict[Tuple[Any, ...], List[int]] = {}

        n = df._num_rows
        key_cols = [df._data[k] for k in keys]

        for i in range(n):
            kt = tuple(col[i] for col in key_cols)
            self.groups.setdefault(kt, []).append(i)

        if sort:
            ordered = sorted(self.groups, key=lambda kt: tuple(_sort_key(v) for v in kt))
            self.groups = {kt: self.groups[kt] for kt in ordered}

    def __iter__(self):
        for kt, idxs in self.groups.items():
            yield kt, self.df.take(idxs)

    def agg(self, spec: Dict[str, List[str]]) -> 'DataFrame':
        out_cols = {k: [] for k in self.keys}
        agg_cols = {}

        for val_col, funs in spec.items():
            if val_col not in self.df._data:
                raise SchemaError(f"Aggregation column '{val_col}' not found. Available: {self.df.columns}")
            for fn in funs:
                agg_cols[f"{fn}_{val_col}"] = []

        for kt, idxs in self.groups.items():
            for j, k in enumerate(self.keys):
                out_cols[k].append(kt[j])

            for val_col, funs in spec.items():
                vals = [self.df._data[val_col][i] for i in idxs]
                nums = [v for v in vals if isinstance(v, (int, float))]

                for fn in funs:
                    col_name = f"{fn}_{val_col}"

                    if fn == 'count':
                        agg_cols[col_name].append(len(idxs))
                    elif not nums:
                        agg_cols[col_name].append(None)
                    elif fn == 'sum':
                        agg_cols[col_name].append(sum(nums))
                    elif fn == 'max':
                        agg_cols[col_name].append(max(nums))
                    else:
                        raise ValueError(f"Unsupported aggregation function: {fn}")

        out_cols.update(agg_cols)
        return DataFrame(out_cols)

    def idxmax(self, column: str) -> List[int]:
        """Row index of the first maximum of ``column`` in each group.

        Groups where the column holds no numeric value are skipped.
        """
        if column not in self.df._data:
            raise SchemaError(f"Column '{column}' not found. Available: {self.df.columns}")

        values = self.df._data[column]
        out = []
        for idxs in self.groups.values():
            best = None
            for i in idxs:
                v = values[i]
                if not isinstance(v, (int, float)):
                    continue
                if best is None or v > values[best]:
                    best = i
            if best is not None:
                out.append(best)
        return out


class DataFrame:
    def __init__(self, data: Dict[str, List[Any]]):
        if not isinstance(data, dict):
            raise TypeError(f"Input must be a dictionary, got {type(data).__name__}")

        self._data = data
        self._length = len(next(iter(data.values()))) if data else 0
        self._num_rows = self._length
        self._num_cols = len(self._data) if self._data else 0

        if data:
            if not all(isinstance(v, list) for v in data.values()):
                raise TypeError("Input data must be a dictionary of lists.")
            if not all(len(v) == self._length for v in data.values()):
                raise ValueError(f"All lists must have the same length. Found lengths: {[len(v) for v in data.values()]}")

    @property
    def columns(self) -> List[str]:
        return list(self._data.keys())

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return f"<DataFrame: {self._num_rows:,} rows x {self._num_cols} columns>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataFrame):
            return NotImplemented
        return self._data == other._data and self.columns == other.columns

    def __getitem__(self, item):
        if isinstance(item, str):
            if item in self._data:
                return self._data[item]
            raise SchemaError(f"Column '{item}' not found")
        elif isinstance(item, list):
            return self.select(item)
        raise TypeError("Invalid argument type. Use string for single column or list for multiple columns.")

    def _require(self, columns: Iterable[str]) -> None:
        missing = [c for c in columns if c not in self._data]
        if missing:
            raise SchemaError(f"Columns not found: {missing}. Available columns: {self.columns}")

    def select(self, columns: List[str]) -> 'DataFrame':
        if not isinstance(columns, list):
            raise TypeError(f"columns must be a list, got {type(columns).__name__}")
        if len(columns) == 0:
            raise ValueError("Cannot select zero columns. Provide at least one column name.")

        self._require(columns)
        return DataFrame({c: self._data[c][:] for c in columns})

    def take(self, indices: List[int]) -> 'DataFrame':
        return DataFrame({col: [vals[i] for i in indices] for col, vals in self._data.items()})

    def head(self, n: int = 5) -> 'DataFrame':
        return DataFrame({col: vals[:n] for col, vals in self._data.items()})

    def filter(self, condition: List[bool]) -> 'DataFrame':
        if not isinstance(condition, list):
            raise TypeError(f"condition must be a list, got {type(condition).__name__}")

        if len(condition) != self._length:
            raise ValueError(
                f"Condition list length ({len(condition)}) must match DataFrame length ({self._length})."
            )

        if not all(isinstance(c, (bool, int)) for c in condition):
            raise TypeError("Condition list must contain only boolean values.")

        return self.take([i for i, c in enumerate(condition) if c])

    def sort_values(self, by: str, ascending: bool = True) -> 'DataFrame':
        """Stable sort on one column; None values always go last."""
        self._require([by])

        values = self._data[by]
        present = [i for i, v in enumerate(values) if v is not None]
        nulls = [i for i, v in enumerate(values) if v is None]
        # reverse=True keeps equal keys in their original order
        present = sorted(present, key=lambda i: values[i], reverse=not ascending)
        return self.take(present + nulls)

    def fillna(self, columns: List[str], value: Any) -> 'DataFrame':
        self._require(columns)
        new_data = {}
        for col, vals in self._data.items():
            if col in columns:
                new_data[col] = [value if v is None else v for v in vals]
            else:
                new_data[col] = vals[:]
        return DataFrame(new_data)

    def dropna(self, columns: Optional[List[str]] = None) -> 'DataFrame':
        columns = self.columns if columns is None else columns
        self._require(columns)
        keep = [
            all(self._data[c][i] is not None for c in columns)
            for i in range(self._length)
        ]
        return self.filter(keep)

    def rename(self, mapping: Dict[str, str]) -> 'DataFrame':
        return DataFrame({mapping.get(c, c): vals[:] for c, vals in self._data.items()})

    def groupby(self, keys: Union[str, List[str]], sort: bool = False) -> 'GroupBy':
        if isinstance(keys, str):
            keys = [keys]
        elif not isinstance(keys, list):
            raise TypeError(f"keys must be a string or list, got {type(keys).__name__}")

        return GroupBy(self, keys, sort=sort)

    def to_records(self) -> List[Dict[str, Any]]:
        cols = self.columns
        return [{c: self._data[c][i] for c in cols} for i in range(self._length)]

    def join(self, other: 'DataFrame', on: Union[Tuple[str, str], List[str]], how: str = 'inner') -> 'DataFrame':
        """Hash join.

        ``on`` is either a ``(left_key, right_key)`` pair, in which case every
        right column is kept with an ``r_`` prefix, or a list of key columns
        shared by both sides, in which case the keys appear once and only
        colliding right columns get the prefix.
        """
        if how not in ('inner', 'left', 'outer'):
            raise NotImplementedError(f"Join type '{how}' not supported. Use 'inner', 'left' or 'outer'.")

        shared = isinstance(on, list)
        if shared:
            left_keys = right_keys = on
        else:
            left_keys, right_keys = [on[0]], [on[1]]

        missing_left = [k for k in left_keys if k not in self.columns]
        if missing_left:
            raise SchemaError(f"Left join key(s) {missing_left} not found in left DataFrame.")
        missing_right = [k for k in right_keys if k not in other.columns]
        if missing_right:
            raise SchemaError(f"Right join key(s) {missing_right} not found in right DataFrame.")

        right_prefix = "r_"
        if shared:
            right_cols = [c for c in other.columns if c not in right_keys]
            right_names = {c: (right_prefix + c if c in self._data else c) for c in right_cols}
        else:
            right_cols = other.columns
            right_names = {c: right_prefix + c for c in right_cols}

        def key_at(df: 'DataFrame', keys: List[str], i: int) -> Tuple[Any, ...]:
            return tuple(df._data[k][i] for k in keys)

        right_map: Dict[Tuple[Any, ...], List[int]] = {}
        for j in range(other._num_rows):
            rk = key_at(other, right_keys, j)
            # Shared-key joins match null keys like any other value
            if shared or None not in rk:
                right_map.setdefault(rk, []).append(j)

        out = {c: [] for c in self.columns}
        for c in right_cols:
            out[right_names[c]] = []

        matched_right = set()
        for i in range(self._num_rows):
            lk = key_at(self, left_keys, i)
            if lk in right_map:
                for j in right_map[lk]:
                    matched_right.add(j)
                    for c in self.columns:
                        out[c].append(self._data[c][i])
                    for c in right_cols:
                        out[right_names[c]].append(other._data[c][j])
            elif how in ('left', 'outer'):
                for c in self.columns:
                    out[c].append(self._data[c][i])
                for c in right_cols:
                    out[right_names[c]].append(None)

        if how == 'outer':
            for j in range(other._num_rows):
                if j in matched_right:
                    continue
                for c in self.columns:
                    if shared and c in right_keys:
                        out[c].append(other._data[c][j])
                    elif not shared and c == left_keys[0]:
                        out[c].append(other._data[right_keys[0]][j])
                    else:
                        out[c].append(None)
                for c in right_cols:
                    out[right_names[c]].append(other._data[c][j])

        return DataFrame(out)


def concat(frames: List[DataFrame]) -> DataFrame:
    """Stack frames with identical columns, preserving their order."""
    frames = [f for f in frames if f.columns]
    if not frames:
        return DataFrame({})
    columns = frames[0].columns
    for f in frames[1:]:
        if f.columns != columns:
            raise SchemaError(f"Cannot concat frames with columns {f.columns} and {columns}")
    return DataFrame({c: [v for f in frames for v in f._data[c]] for c in columns})
