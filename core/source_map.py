# core/source_map.py
import sourcemap
from core.entities import OriginalPosition


class SourceMapError(ValueError):
    pass


class SourceMap:
    """
    Decoded Source Map v3 (decoding and lookup by the `sourcemap` package).

    Lookups take a 1-based generated line and a 0-based generated column and
    answer with the closest mapping at or left of that column on the same line.
    Call close() (or use as a context manager) to drop the decoded index.
    """

    def __init__(self, index) -> None:
        self._index = index

    @classmethod
    def loads(cls, text: str) -> "SourceMap":
        try:
            index = sourcemap.loads(text)
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise SourceMapError(f"cannot decode: {type(e).__name__} {e}") from e
        raw = index.raw
        if "sections" in raw:
            raise SourceMapError("indexed source maps are not supported")
        if raw.get("version") != 3:
            raise SourceMapError(f"unsupported version {raw.get('version')!r}")
        return cls(index)

    def original_position_for(self, line: int, column: int) -> OriginalPosition:
        if self._index is None:
            raise SourceMapError("source map is closed")
        row = line - 1
        if row < 0 or row >= len(self._index.line_index):
            return OriginalPosition()
        # lookup() has no notion of "left of the first mapping"; answer empty
        columns = self._index.line_index[row]
        if not columns or column < columns[0]:
            return OriginalPosition()
        token = self._index.lookup(row, column)
        if token.src is None:
            return OriginalPosition()
        return OriginalPosition(
            source=token.src,
            line=token.src_line + 1,
            column=token.src_col,
            name=token.name,
        )

    def close(self) -> None:
        self._index = None

    def __enter__(self) -> "SourceMap":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
