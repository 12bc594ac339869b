"""Service factories binding domain services to a request session."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.caching import Cache
from src.domain.services.books import BooksService
from src.infrastructure.config import Settings, settings
from src.infrastructure.persistence.repositories import get_repositories


def get_books_service(
    session: AsyncSession, cache: Cache, config: Settings = settings
) -> BooksService:
    """Build a BooksService over the session's repositories.

    The service commits the session after each successful write and only then
    evicts the cache, so the next population reads committed rows:

        async def handler(
            session: AsyncSession = Depends(get_session),
        ) -> ...:
            service = get_books_service(session, cache)
            return to_http_response(await service.delete_book(book_id))
    """
    repos = get_repositories(session)
    return BooksService(
        repos.books,
        repos.authors,
        cache,
        cache_options=config.cache_entry_options,
        redact_errors=config.redact_error_messages,
        commit=session.commit,
    )
