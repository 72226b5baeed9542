from xml.sax.saxutils import escape

XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def escape_xml(text: str) -> str:
    """Escape & < > " ' for element text."""
    return escape(text, XML_ENTITIES)


def message_response(text: str) -> str:
    """Single-message reply document for the SMS gateway."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        "<Response>\n"
        f"  <Message>{escape_xml(text)}</Message>\n"
        "</Response>"
    )
