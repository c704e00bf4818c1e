"""
Reading EAUT services out of XRDS documents with ElementTree.
"""
from xml.etree import ElementTree as ET


NAMESPACES = {
    'xrd': 'xri://$xrd*($v*2.0)',
    'xrds': 'xri://$xrds',
}


def t(prefixed_name):
    prefix, name = prefixed_name.split(':')
    return '{%s}%s' % (NAMESPACES[prefix], name)


class XRDSError(Exception):
    '''
    The document is not a usable XRDS.
    '''


def parseXRDS(text):
    """Parses text (bytes or str) as an XRDS document.

    @return: ElementTree with the XRDS root

    @raises XRDSError: for non-XML text and for XML with another root.
    """
    try:
        root = ET.XML(text)
    except ET.ParseError as e:
        raise XRDSError('Error parsing document as XML: %s' % e)
    if root.tag != t('xrds:XRDS'):
        raise XRDSError('Not an XRDS document: root is %s' % root.tag)
    return ET.ElementTree(root)


def _priority(element):
    '''
    Sort key for the priority attribute. Elements without a (numeric)
    priority go after all the others.
    '''
    try:
        return (0, int(element.get('priority')))
    except (TypeError, ValueError):
        return (1, 0)


def iterServices(tree):
    """Service elements of the final XRD, highest priority (lowest number)
    first."""
    xrds = tree.findall(t('xrd:XRD'))
    if not xrds:
        raise XRDSError('No XRD elements found')
    # only the last XRD element counts
    return sorted(xrds[-1].findall(t('xrd:Service')), key=_priority)


def getURIs(service_element):
    uri_elements = sorted(service_element.findall(t('xrd:URI')), key=_priority)
    uris = [(e.text or '').strip() for e in uri_elements]
    return [uri for uri in uris if uri]


def getURI(service_element):
    """The preferred URI of a Service element or None."""
    uris = getURIs(service_element)
    return uris[0] if uris else None


def getTypeURIs(service_element):
    return [e.text.strip() for e in service_element.findall(t('xrd:Type')) if e.text]


def matches_types(element, types):
    '''
    Checks if the service element has any of the types. An empty list of
    types matches everything.
    '''
    return not types or bool(set(types) & set(getTypeURIs(element)))


def get_elements(data, types):
    '''
    Parses an XRDS document and returns its service elements that have one
    of the types and at least one URI, in priority order.
    '''
    return [
        e for e in iterServices(parseXRDS(data))
        if matches_types(e, types) and getURI(e) is not None
    ]
