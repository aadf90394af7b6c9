from models import db
from models.user import User, Role
from security.password import hash_password

DEFAULT_ROLES = ["CUSTOMER", "ADMIN"]

def seed_roles() -> list[str]:
    """Create missing default roles. Returns the names that were added."""
    existing = {r.name for r in Role.query.all()}
    added = [name for name in DEFAULT_ROLES if name not in existing]
    for name in added:
        db.session.add(Role(name=name))
    db.session.commit()
    return added

def grant_role(user: User, role_name: str) -> bool:
    """Attach ``role_name`` to ``user``; the caller commits."""
    role = Role.query.filter_by(name=role_name).first()
    if not role:
        role = Role(name=role_name)
        db.session.add(role)
    if role in user.roles:
        return False
    user.roles.append(role)
    return True

def create_admin(email: str, password: str, full_name=None) -> User:
    """Bootstrap a back-office account; promotes the user if it already exists."""
    email = email.strip().lower()
    user = User.query.filter_by(email=email).first()
    if not user:
        user = User(email=email, password_hash=hash_password(password), full_name=full_name)
        db.session.add(user)
    grant_role(user, "ADMIN")
    db.session.commit()
    return user
