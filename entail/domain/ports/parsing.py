from typing import Protocol


class TreeEncoderPort(Protocol):
    """
    Turns sentence text into the stripped-down CoNLL tree the engine reads:
    one token per line, `word<TAB>governor<TAB>relation<TAB>0`.
    """

    def encode(self, text: str) -> str:
        pass
