class DataUnavailable(Exception):
    """Records or the stored configuration could not be read or written."""
    pass
