from typing import List, Tuple, Union

from app.core.turn import ChatCompletion, ModerationCategory, ModerationVerdict, Stage

APPROVED = ModerationVerdict(approved=True)


class StubModeration:
    """Deterministischer Oracle-Ersatz: ein Ergebnis (oder Fehler) pro Stufe."""

    def __init__(
        self,
        input_result: Union[ModerationVerdict, Exception] = APPROVED,
        output_result: Union[ModerationVerdict, Exception] = APPROVED,
    ):
        self.input_result = input_result
        self.output_result = output_result
        self.calls: List[Tuple[str, Stage]] = []

    async def classify(self, text, stage=Stage.INPUT, context=()):
        self.calls.append((text, stage))
        result = self.input_result if stage == Stage.INPUT else self.output_result
        if isinstance(result, Exception):
            raise result
        return result


class StubChat:
    def __init__(self, result: Union[str, Exception] = "Mars is the fourth planet..."):
        self.result = result
        self.calls = []

    async def complete(self, message, history=()):
        self.calls.append((message, tuple(history)))
        if isinstance(self.result, Exception):
            raise self.result
        return ChatCompletion(text=self.result, raw={"stub": True})


def rejected(category: ModerationCategory, rationale: str = "oracle says no") -> ModerationVerdict:
    return ModerationVerdict(approved=False, category=category, rationale=rationale)

