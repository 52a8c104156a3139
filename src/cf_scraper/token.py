"""Extraction of the anti-automation token from the portal homepage."""
import logging

from bs4 import BeautifulSoup

from .errors import TokenNotFound

logger = logging.getLogger(__name__)

TOKEN_FIELD_ID = "orders-stoken"


def extract_token(html: str, field_id: str = TOKEN_FIELD_ID) -> str:
    """Return the value of the hidden token field, or raise TokenNotFound."""
    soup = BeautifulSoup(html or "", "html.parser")
    element = soup.find(id=field_id)
    if element is None:
        logger.debug(f"No element with id {field_id!r} in homepage")
        raise TokenNotFound(field_id)

    if element.name == "textarea":
        value = element.get_text()
    else:
        value = element.get("value") or ""

    value = value.strip()
    if not value:
        raise TokenNotFound(field_id)
    return value
