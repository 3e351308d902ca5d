"""Name cleaning and the length rules for classroom and quiz names."""

CLASSROOM_NAME_MIN = 8
CLASSROOM_NAME_MAX = 150
QUIZ_NAME_MIN = 4
QUIZ_NAME_MAX = 60


def clean_name(name):
    """Trim and collapse runs of whitespace to one space. This is the stored form."""
    return ' '.join((name or '').split())


def normalize_name(name):
    """Comparison key: the cleaned name, lowercased."""
    return clean_name(name).lower()


def is_valid_classroom_name(name):
    return CLASSROOM_NAME_MIN <= len(name) <= CLASSROOM_NAME_MAX


def is_valid_quiz_name(name):
    return QUIZ_NAME_MIN <= len(name) <= QUIZ_NAME_MAX
