"""JSON shapes returned by the API (camelCase, ISO-8601 datetimes)."""
from datetime import datetime

from bookshare.utils.dates import days_remaining, is_overdue, iso


def request_status_dict(req):
    if not req:
        return None
    return {"id": req.id, "status": req.status, "requestDate": iso(req.request_date)}


def book_dict(b, pending_request=None, with_request_status=False, with_owner=False):
    data = {
        "id": b.id,
        "title": b.title,
        "author": b.author,
        "isbn": b.isbn,
        "publishedYear": b.published_year,
        "description": b.description,
        "coverImage": b.cover_image,
        "available": bool(b.available),
        "userId": b.user_id,
        "createdAt": iso(b.created_at),
        "updatedAt": iso(b.updated_at),
    }
    if with_owner:
        data["ownerName"] = b.owner.name if b.owner else None
    if with_request_status:
        data["requestStatus"] = request_status_dict(pending_request)
    return data


def request_dict(r):
    return {
        "id": r.id,
        "bookId": r.book_id,
        "requesterId": r.requester_id,
        "ownerId": r.owner_id,
        "status": r.status,
        "message": r.message,
        "requestDate": iso(r.request_date),
        "responseDate": iso(r.response_date),
    }


def received_request_dict(r):
    data = request_dict(r)
    data.update({
        "bookTitle": r.book.title if r.book else None,
        "bookAuthor": r.book.author if r.book else None,
        "bookCoverImage": r.book.cover_image if r.book else None,
        "requesterName": r.requester.name if r.requester else None,
        "requesterEmail": r.requester.email if r.requester else None,
    })
    return data


def sent_request_dict(r):
    data = request_dict(r)
    data.update({
        "bookTitle": r.book.title if r.book else None,
        "bookAuthor": r.book.author if r.book else None,
        "bookCoverImage": r.book.cover_image if r.book else None,
        "ownerName": r.owner.name if r.owner else None,
    })
    return data


def loan_dict(x):
    return {
        "id": x.id,
        "userId": x.user_id,
        "bookId": x.book_id,
        "requestId": x.request_id,
        "borrowedAt": iso(x.borrowed_at),
        "dueDate": iso(x.due_date),
        "returnedAt": iso(x.returned_at),
    }


def borrowed_book_dict(x, now: datetime = None):
    now = now or datetime.utcnow()
    data = loan_dict(x)
    data.update({
        "daysRemaining": days_remaining(x.due_date, now),
        "overdue": is_overdue(x, now),
        "book": book_dict(x.book) if x.book else None,
        "owner": {"name": x.book.owner.name if x.book and x.book.owner else None},
    })
    return data


def user_dict(u):
    return {"id": u.id, "name": u.name, "email": u.email, "createdAt": iso(u.created_at)}
