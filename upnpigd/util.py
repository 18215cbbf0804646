import logging


def _getLogger(name):
    """
    Retrieve the logger of a library component, named below the `upnpigd`
    logger so applications can configure them all at once.
    """
    return logging.getLogger("upnpigd.%s" % name)


def _tail_matches(chain, tail):
    """
    Whether the last elements of `chain` are equal to `tail`.
    """
    if len(chain) < len(tail):
        return False
    return chain[len(chain) - len(tail):] == list(tail)
