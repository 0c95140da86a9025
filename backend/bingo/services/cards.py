from bingo.models import CARD_SIZE, MAX_NUMBER, MIN_NUMBER

INVALID_FORMAT = 'Invalid card format'
OUT_OF_RANGE = f'Numbers must be between {MIN_NUMBER} and {MAX_NUMBER}'
DUPLICATES = 'Duplicate numbers in card'


class CardValidationError(ValueError):
    """Raised when a submitted card is malformed."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _is_number(value) -> bool:
    # bool is an int subclass but never a valid cell
    return isinstance(value, int) and not isinstance(value, bool)


def validate_card(card):
    """Check a submitted card and return it as a list of rows.

    A card is a 5x5 list of integers in [1, 90] with no value repeated
    anywhere in the 25 cells. Shape is checked first, then ranges, then
    duplicates.
    """
    if not isinstance(card, list) or len(card) != CARD_SIZE:
        raise CardValidationError(INVALID_FORMAT)
    for row in card:
        if not isinstance(row, list) or len(row) != CARD_SIZE:
            raise CardValidationError(INVALID_FORMAT)
        for num in row:
            if not _is_number(num) or num < MIN_NUMBER or num > MAX_NUMBER:
                raise CardValidationError(OUT_OF_RANGE)

    seen = set()
    for row in card:
        for num in row:
            if num in seen:
                raise CardValidationError(DUPLICATES)
            seen.add(num)
    return [list(row) for row in card]
