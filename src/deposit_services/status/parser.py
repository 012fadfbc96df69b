"""Atom status document parser.

A SWORD v2 statement is an Atom feed. DSpace reports the state of a deposit
as an atom:category whose scheme is the SWORD state scheme and whose term is
one of the DSpace state URIs:

    <feed xmlns="http://www.w3.org/2005/Atom">
      <category scheme="http://purl.org/net/sword/terms/state"
                term="http://dspace.org/state/archived"
                label="State"/>
      <entry>...</entry>
    </feed>
"""

import logging

from lxml import etree

from schemas.status import SWORD_STATE_PRECEDENCE, SWORD_STATE_SCHEME, SwordState

from ..exceptions import StatusParseError

logger = logging.getLogger(__name__)

ATOM_NS = "http://www.w3.org/2005/Atom"

NSMAP = {"atom": ATOM_NS}


def parse_statement(root: etree._Element) -> SwordState | None:
    """Extract the deposit state from a decoded Atom document.

    Looks at the categories of the feed itself and of each of its entries
    (or of the entry, for an entry document). When several recognised
    states are present the most terminal one wins:
    archived > withdrawn > in-review > in-progress.

    Args:
        root: Root element of an Atom feed or entry

    Returns:
        The deposit state, or None if no recognised state is present
    """
    categories = root.findall("atom:category", NSMAP) + root.findall(
        "atom:entry/atom:category", NSMAP
    )

    found: set[SwordState] = set()
    for category in categories:
        if category.get("scheme") != SWORD_STATE_SCHEME:
            continue
        term = (category.get("term") or "").strip()
        try:
            found.add(SwordState(term))
        except ValueError:
            logger.warning(f"Ignoring unknown deposit state '{term}'")

    for state in SWORD_STATE_PRECEDENCE:
        if state in found:
            return state
    return None


class AtomStatusParser:
    """Parse deposit state from SWORD v2 Atom statements.

    The parser fetches documents through an injected fetcher (any object
    with a ``fetch(location) -> bytes`` method, e.g. StatusDocumentClient or
    LocalDocumentFetcher) and performs no retries of its own.

    Example:
        with StatusDocumentClient(config) as client:
            state = AtomStatusParser(client).parse(statement_url)
    """

    def __init__(self, fetcher):
        self.fetcher = fetcher

    def parse(self, location: str) -> SwordState | None:
        """Fetch and parse the status document at location.

        Args:
            location: URL or path of the status document

        Returns:
            The deposit state, or None if the document reports no known state

        Raises:
            StatusParseError: If the document cannot be fetched, is not
                              well-formed XML, or is not an Atom document
        """
        try:
            content = self.fetcher.fetch(location)
            parser = etree.XMLParser(resolve_entities=False, no_network=True)
            root = etree.fromstring(content, parser=parser)
        except Exception as e:
            raise StatusParseError(location, cause=e) from e

        if root.tag not in (f"{{{ATOM_NS}}}feed", f"{{{ATOM_NS}}}entry"):
            cause = ValueError(f"expected an Atom feed, found {root.tag}")
            raise StatusParseError(location, cause=cause) from cause

        state = parse_statement(root)
        logger.debug(f"Status document {location} reports state {state}")
        return state
