class Corpus:
    """Accepted expression texts. Grows for the lifetime of a run, never pruned."""

    def __init__(self, texts=()):
        self._seen = set()
        for text in texts:
            self.add(text)

    def add(self, text):
        """Record text; True only the first time it is seen."""
        if text in self._seen:
            return False
        self._seen.add(text)
        return True

    def __contains__(self, text):
        return text in self._seen

    def __len__(self):
        return len(self._seen)

    def __iter__(self):
        return iter(self._seen)
