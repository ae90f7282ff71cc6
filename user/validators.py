import re

from django.core.exceptions import ValidationError


class CharacterClassValidator:
    """
    Require at least one lowercase letter, one uppercase letter, one digit and
    one special character.
    """

    RULES = [
        (r'[a-z]', 'a lowercase letter'),
        (r'[A-Z]', 'an uppercase letter'),
        (r'\d', 'a number'),
        (r'[^A-Za-z0-9]', 'a special character'),
    ]

    def validate(self, password, user=None):
        missing = [label for pattern, label in self.RULES if not re.search(pattern, password)]
        if missing:
            raise ValidationError(
                f"Password must contain {', '.join(missing)}.",
                code='password_missing_character_class',
            )

    def get_help_text(self):
        return 'Your password must mix lowercase, uppercase, digits and special characters.'
