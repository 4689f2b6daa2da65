import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.auth import Identity, hash_password, verify_password
from app.constants.roles import RoleName
from app.exceptions import DuplicateResourceError, InvalidCredentialsError
from app.models.admin import Admin
from app.models.tenant import Tenant
from app.schemas.auth import AdminCreate

logger = logging.getLogger(__name__)


async def authenticate(username: str, password: str, db: AsyncSession) -> tuple[Identity, str | None]:
    """
    Resolve credentials to an identity.

    Staff accounts are checked before tenants. The same error is raised for
    an unknown username and a wrong password.

    Returns:
        The identity and the account's email
    """
    result = await db.execute(select(Admin).where(Admin.username == username))
    admin = result.scalars().first()
    if admin and verify_password(password, admin.password):
        logger.info(f"Staff login: {username} ({admin.role_name.value})")
        identity = Identity(
            user_id=admin.admin_id,
            username=admin.username,
            role=admin.role_name,
            full_name=admin.full_name,
        )
        return identity, admin.email

    if admin is None:
        result = await db.execute(select(Tenant).where(Tenant.username == username))
        tenant = result.unique().scalars().first()
        if tenant and verify_password(password, tenant.password):
            logger.info(f"Tenant login: {username}")
            identity = Identity(
                user_id=tenant.tenant_id,
                username=tenant.username,
                role=RoleName.TENANT,
                full_name=tenant.full_name,
            )
            return identity, tenant.email

    logger.warning(f"Failed login attempt for username: {username}")
    raise InvalidCredentialsError()


async def register_admin(data: AdminCreate, db: AsyncSession) -> Admin:
    """Create a staff account. Usernames are unique across staff and tenants."""
    for model in (Admin, Tenant):
        result = await db.execute(
            select(model.username).where(or_(model.username == data.username, model.email == data.email))
        )
        taken = result.first()
        if taken is not None:
            field = "username" if taken.username == data.username else "email"
            raise DuplicateResourceError("Account", field, getattr(data, field))

    admin = Admin(
        username=data.username,
        password=hash_password(data.password),
        full_name=data.full_name,
        email=data.email,
        contact_number=data.contact_number,
        role=data.role,
    )

    try:
        db.add(admin)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateResourceError("Account", "username", data.username) from e

    await db.refresh(admin)
    logger.info(f"Registered {admin.role_name.value} account '{admin.username}'")
    return admin
