"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, func, select, update

from homeservice.db import get_session
from homeservice.db.models import Booking, Service, User, UserSession


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session.

    Every method opens and closes its own session; returned entities are
    detached but fully loaded.
    """

    # -------------------------- services --------------------------
    def list_services(self) -> list[Service]:
        with get_session() as session:
            stmt = select(Service).order_by(Service.created_at.asc())
            return list(session.execute(stmt).scalars().all())

    def get_service(self, service_id: str) -> Optional[Service]:
        if not service_id:
            return None
        with get_session() as session:
            return session.get(Service, service_id)

    def get_services(self, service_ids: set[str]) -> dict[str, Service]:
        if not service_ids:
            return {}
        with get_session() as session:
            stmt = select(Service).where(Service.id.in_(service_ids))
            return {svc.id: svc for svc in session.execute(stmt).scalars().all()}

    def create_service(self, name: str, price: float, description: str = "") -> Service:
        now = datetime.now(timezone.utc)
        entity = Service(name=name, price=price, description=description or "", created_at=now, updated_at=now)
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def delete_service(self, service_id: str) -> None:
        with get_session() as session:
            session.execute(delete(Service).where(Service.id == service_id))
            session.commit()

    def delete_all_services(self) -> int:
        with get_session() as session:
            result = session.execute(delete(Service))
            session.commit()
            return int(result.rowcount or 0)

    # -------------------------- users --------------------------
    def get_user(self, user_id: str) -> Optional[User]:
        if not user_id:
            return None
        with get_session() as session:
            return session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with get_session() as session:
            stmt = select(User).where(User.email == (email or "").strip().lower())
            return session.execute(stmt).scalar_one_or_none()

    def create_user(self, name: str, email: str, password_hash: str) -> User:
        now = datetime.now(timezone.utc)
        entity = User(
            name=name,
            email=(email or "").strip().lower(),
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def update_user_password(self, user_id: str, password_hash: str) -> None:
        with get_session() as session:
            stmt = (
                update(User)
                .where(User.id == user_id)
                .values(password_hash=password_hash, updated_at=datetime.now(timezone.utc))
            )
            session.execute(stmt)
            session.commit()

    # -------------------------- sessions --------------------------
    def create_user_session(self, user_id: str, expires_at: datetime) -> str:
        token = secrets.token_urlsafe(32)
        entity = UserSession(token=token, user_id=user_id, expires_at=expires_at, created_at=datetime.now(timezone.utc))
        with get_session() as session:
            session.add(entity)
            session.commit()
        return token

    def get_user_session(self, token: str) -> Optional[UserSession]:
        if not token:
            return None
        with get_session() as session:
            return session.get(UserSession, token)

    def delete_user_session(self, token: str) -> None:
        with get_session() as session:
            session.execute(delete(UserSession).where(UserSession.token == token))
            session.commit()

    # -------------------------- bookings --------------------------
    def list_bookings(
        self,
        *,
        user_id: str | None = None,
        customer_name: str | None = None,
        service_id: str | None = None,
    ) -> list[Booking]:
        stmt = select(Booking)
        if user_id:
            stmt = stmt.where(Booking.user_id == user_id)
        if customer_name:
            stmt = stmt.where(func.lower(Booking.customer_name).contains(customer_name.lower(), autoescape=True))
        if service_id:
            stmt = stmt.where(Booking.service_id == service_id)
        stmt = stmt.order_by(Booking.created_at.desc())
        with get_session() as session:
            return list(session.execute(stmt).scalars().all())

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        if not booking_id:
            return None
        with get_session() as session:
            return session.get(Booking, booking_id)

    def create_booking(
        self,
        *,
        service_id: str,
        customer_name: str,
        date: datetime,
        contact_method: str,
        time_slot: str,
        email: str | None = None,
        phone: str | None = None,
        user_id: str | None = None,
    ) -> Booking:
        now = datetime.now(timezone.utc)
        entity = Booking(
            service_id=service_id,
            user_id=user_id,
            customer_name=customer_name,
            date=date,
            contact_method=contact_method,
            email=email,
            phone=phone,
            time_slot=time_slot,
            created_at=now,
            updated_at=now,
        )
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def update_booking(self, booking_id: str, values: dict) -> Optional[Booking]:
        with get_session() as session:
            entity = session.get(Booking, booking_id)
            if not entity:
                return None
            for key, value in values.items():
                setattr(entity, key, value)
            entity.updated_at = datetime.now(timezone.utc)
            session.commit()
            session.refresh(entity)
            return entity

    def delete_booking(self, booking_id: str) -> bool:
        with get_session() as session:
            result = session.execute(delete(Booking).where(Booking.id == booking_id))
            session.commit()
            return bool(result.rowcount)
