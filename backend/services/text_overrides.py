"""
Text overrides applied to a template's fields before rendering.
"""
from typing import Iterable, Optional, Sequence, Tuple

from domain.models import Template, TextField


def apply_text_overrides(fields: Iterable[TextField], texts: Sequence[str]) -> Tuple[TextField, ...]:
    """
    Replace field texts by position.

    Fields beyond the number of overrides keep their text; overrides beyond
    the number of fields are ignored.
    """
    result = []
    for index, field in enumerate(fields):
        if index < len(texts):
            field = field.with_text(texts[index])
        result.append(field)
    return tuple(result)


def substitute_text(fields: Iterable[TextField], find: str, replace: str) -> Tuple[TextField, ...]:
    """Replace every literal occurrence of `find` in every field's text."""
    if not find:
        return tuple(fields)
    return tuple(
        field.with_text(field.text.replace(find, replace)) if find in field.text else field
        for field in fields
    )


def apply_to_template(
    template: Template,
    texts: Optional[Sequence[str]] = None,
    replacement: Optional[Tuple[str, str]] = None,
) -> Template:
    """Return a new template with positional overrides, then substitution, applied."""
    fields = template.fields
    if texts:
        fields = apply_text_overrides(fields, texts)
    if replacement:
        fields = substitute_text(fields, *replacement)
    if fields is template.fields:
        return template
    return template.with_fields(fields)
