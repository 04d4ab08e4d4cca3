KEY_DELIMITER = "::"
INDEX_SUFFIX = "-index"


def build_key(name: str, doc_id: str) -> str:
    """Storage key of one entry. ``::`` inside names or ids is unsupported."""
    return f"{name}{KEY_DELIMITER}{doc_id}"


def index_name(name: str) -> str:
    return name + INDEX_SUFFIX


class KeySpace:
    """All storage keys owned by one collection."""

    def __init__(self, name: str):
        self.name = name
        self.index_key = index_name(name)

    def entry_key(self, doc_id: str) -> str:
        return build_key(self.name, doc_id)

    @staticmethod
    def id_of(key: str) -> str:
        return key.rsplit(KEY_DELIMITER, 1)[-1]

    def __repr__(self):
        return f"<KeySpace {self.name!r}>"
