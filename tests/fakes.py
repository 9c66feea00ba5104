from core.genai_client import ModelReply


class FakeAPIError(Exception):
    """Mimics google.genai.errors.APIError, which carries the HTTP status in `code`."""

    def __init__(self, code: int, message: str = "boom"):
        super().__init__(f"{code} {message}")
        self.code = code


class FakeModelClient:
    """Plays back scripted outcomes: a ModelReply/str to return or an exception to raise."""

    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [])
        self.prompts = []
        self.locations = []

    async def generate(self, prompt, location=None):
        self.prompts.append(prompt)
        self.locations.append(location)
        outcome = self.outcomes.pop(0) if self.outcomes else ""
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, str):
            return ModelReply(text=outcome)
        return outcome

    @property
    def calls(self) -> int:
        return len(self.prompts)
