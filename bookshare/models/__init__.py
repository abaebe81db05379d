from bookshare.models.user import User
from bookshare.models.book import Book
from bookshare.models.borrow_request import BorrowRequest
from bookshare.models.loan import Loan
from bookshare.models.mail_log import MailLog

__all__ = ["User", "Book", "BorrowRequest", "Loan", "MailLog"]
