DEFAULT_ENTRY_NAME = "image.jpg"


def split_extension(name: str) -> tuple[str, str]:
    """Split ``name`` at its last dot into ``(base, ".ext")``.

    A leading dot is part of the base, so ``.hidden`` has no extension.
    """
    dot = name.rfind(".")
    if dot <= 0:
        return name, ""
    return name[:dot], name[dot:]


class NameRegistry:
    """Hands out unique entry names for one archive.

    The first occurrence of a name is kept as is, the Nth repeat becomes
    ``base_N.ext``. If a generated name happens to be taken already, N keeps
    counting up until a free name is found.
    """

    def __init__(self) -> None:
        self._occurrences: dict[str, int] = {}
        self._used: set[str] = set()

    def resolve(self, desired_name: str | None) -> str:
        name = desired_name or DEFAULT_ENTRY_NAME
        count = self._occurrences.get(name, 0) + 1
        candidate = name if count == 1 else self._numbered(name, count)
        while candidate in self._used:
            count += 1
            candidate = self._numbered(name, count)
        self._occurrences[name] = count
        self._used.add(candidate)
        return candidate

    def __contains__(self, name: str) -> bool:
        return name in self._used

    def __len__(self) -> int:
        return len(self._used)

    @staticmethod
    def _numbered(name: str, n: int) -> str:
        base, ext = split_extension(name)
        return f"{base}_{n}{ext}"


__all__ = ["DEFAULT_ENTRY_NAME", "NameRegistry", "split_extension"]
