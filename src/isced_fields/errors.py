"""Exceptions raised while harvesting and deriving the ISCED-F artifacts."""


class HarvestError(Exception):
    """Base class for every error that aborts a harvest run."""


class FetchError(HarvestError):
    """A node could not be retrieved or its response could not be parsed."""

    def __init__(self, uri: str, reason: str):
        self.uri = uri
        self.reason = reason
        super().__init__(f"Failed to fetch {uri}: {reason}")


class MissingPropertyError(HarvestError):
    """A node lacks its identifier or a required SKOS relation."""

    def __init__(self, uri: str, prop: str):
        self.uri = uri
        self.prop = prop
        super().__init__(f"{uri} has no {prop}")


class MissingLabelError(HarvestError):
    """A node has no label in the language used as the lookup key."""

    def __init__(self, code: str, lang: str = "en"):
        self.code = code
        self.lang = lang
        super().__init__(f"{code} has no '{lang}' label")
