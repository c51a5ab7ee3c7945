"""HTML helpers."""

from bs4 import BeautifulSoup


def extract_input_value(html: str, name: str) -> str | None:
    """Return the ``value`` of the first ``<input name=...>`` in the document.

    Args:
        html: HTML document
        name: Value of the input's ``name`` attribute

    Returns:
        The value, or None if there is no such input or it has no value
    """
    soup = BeautifulSoup(html, "html.parser")
    field = soup.find("input", attrs={"name": name})
    if field is None:
        return None
    value = field.get("value")
    return value if value else None
