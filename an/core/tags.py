"""Tag counting for notes."""

from __future__ import annotations

SORT_ORDERS = ("asc", "desc")


class TagHandler:
    """Counts tag list items found under a "tags:" section.

    ``tag_counts`` maps each tag to its number of occurrences and
    ``tag_list`` keeps the distinct tags in first-seen order.
    """

    def __init__(self) -> None:
        self.tag_counts: dict[str, int] = {}
        self.tag_list: list[str] = []

    def parse_tag(self, tag: str) -> None:
        name = tag.strip()
        if not name:
            return
        if name not in self.tag_counts:
            self.tag_list.append(name)
            self.tag_counts[name] = 0
        self.tag_counts[name] += 1

    def count(self, tag: str) -> int:
        return self.tag_counts.get(tag, 0)

    def sorted_tag_counts(self, order: str = "desc") -> list[tuple[str, int]]:
        """Return ``(tag, count)`` pairs ordered by count, ties alphabetical."""
        if order not in SORT_ORDERS:
            raise ValueError(
                f"Invalid sort order {order!r}. Use 'asc' for ascending or 'desc' for descending."
            )
        if order == "desc":
            return sorted(self.tag_counts.items(), key=lambda item: (-item[1], item[0]))
        return sorted(self.tag_counts.items(), key=lambda item: (item[1], item[0]))

    def alphabetical(self) -> list[tuple[str, int]]:
        return sorted(self.tag_counts.items())

    def __len__(self) -> int:
        return len(self.tag_list)
