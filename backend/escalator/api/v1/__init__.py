from . import filters, mail, records, uploads

__all__ = ["filters", "mail", "records", "uploads"]
