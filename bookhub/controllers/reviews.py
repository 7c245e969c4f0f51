"""Review endpoints: listing, writing, editing and removing book reviews."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookhub.controllers.dependencies import IdentityDep, SessionDep, raise_for_decision
from bookhub.models.book import Book
from bookhub.models.review import Review
from bookhub.models.user import User as UserModel
from bookhub.services.access import (
    account_active,
    can_delete_review,
    can_update_review,
)
from bookhub.views import (
    ReviewCreateRequest,
    ReviewResponse,
    ReviewUpdateRequest,
    SuccessResponse,
)

router = APIRouter(prefix="/reviews", tags=["reviews"])


def _serialize_review(
    review: Review,
    username: str | None,
    book_title: str | None,
) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        user_id=review.user_id,
        user_name=username,
        book_id=review.book_id,
        book_title=book_title,
        rating=review.rating,
        review_text=review.review_text,
        created_at=review.created_at,
    )


async def _fetch_reviews(session: AsyncSession, *criteria) -> list[ReviewResponse]:
    """Return matching reviews, newest first."""

    result = await session.execute(
        select(Review, UserModel.username, Book.title)
        .join(UserModel, UserModel.id == Review.user_id)
        .join(Book, Book.id == Review.book_id)
        .where(*criteria)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .execution_options(populate_existing=True)
    )
    return [
        _serialize_review(review, username, title)
        for review, username, title in result.all()
    ]


async def _fetch_review(session: AsyncSession, review_id: int) -> ReviewResponse:
    reviews = await _fetch_reviews(session, Review.id == review_id)
    return reviews[0]


@router.get("", response_model=list[ReviewResponse])
async def list_reviews(
    session: SessionDep,
    _identity: IdentityDep,
) -> list[ReviewResponse]:
    return await _fetch_reviews(session)


@router.get("/book/{book_id}", response_model=list[ReviewResponse])
async def list_reviews_for_book(
    book_id: int,
    session: SessionDep,
    _identity: IdentityDep,
) -> list[ReviewResponse]:
    return await _fetch_reviews(session, Review.book_id == book_id)


@router.get("/user/{user_id}", response_model=list[ReviewResponse])
async def list_reviews_by_user(
    user_id: int,
    session: SessionDep,
    _identity: IdentityDep,
) -> list[ReviewResponse]:
    return await _fetch_reviews(session, Review.user_id == user_id)


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    payload: ReviewCreateRequest,
    session: SessionDep,
    identity: IdentityDep,
) -> ReviewResponse:
    """Review a book; each user may review a given book once."""

    raise_for_decision(await account_active(session, identity), "create_review")

    book = await session.execute(select(Book.id).where(Book.id == payload.book_id))
    if book.scalar_one_or_none() is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Book not found.",
        )

    existing = await session.execute(
        select(Review.id).where(
            Review.user_id == identity.user_id,
            Review.book_id == payload.book_id,
        )
    )
    if existing.first() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already reviewed this book.",
        )

    review = Review(
        user_id=identity.user_id,
        book_id=payload.book_id,
        rating=payload.rating,
        review_text=payload.review_text,
    )
    session.add(review)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Unable to save review.",
        ) from exc

    return await _fetch_review(session, review.id)


@router.patch("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: int,
    payload: ReviewUpdateRequest,
    session: SessionDep,
    identity: IdentityDep,
) -> ReviewResponse:
    if payload.rating is None and payload.review_text is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one field (rating or reviewText) must be provided.",
        )

    decision = await can_update_review(session, identity, review_id)
    raise_for_decision(decision, "update_review")

    result = await session.execute(select(Review).where(Review.id == review_id))
    review = result.scalar_one()
    if payload.rating is not None:
        review.rating = payload.rating
    if payload.review_text is not None:
        review.review_text = payload.review_text
    await session.commit()

    return await _fetch_review(session, review_id)


@router.delete("/{review_id}", response_model=SuccessResponse)
async def delete_review(
    review_id: int,
    session: SessionDep,
    identity: IdentityDep,
) -> SuccessResponse:
    decision = await can_delete_review(session, identity, review_id)
    raise_for_decision(decision, "delete_review")

    await session.execute(delete(Review).where(Review.id == review_id))
    await session.commit()
    return SuccessResponse(message="Review deleted.")
