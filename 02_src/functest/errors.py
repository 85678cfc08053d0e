"""Assertion failures raised by the functional test harness."""


class ExpectationFailure(AssertionError):
    """One or more expectations were not met.

    Every mismatch found by a single assertion is reported together.
    """

    def __init__(self, summary: str, mismatches: list[str] | None = None):
        self.summary = summary
        self.mismatches = list(mismatches or [])
        lines = [summary, *(f"  - {m}" for m in self.mismatches)]
        super().__init__("\n".join(lines))
