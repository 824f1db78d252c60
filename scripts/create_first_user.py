import argparse
import sys
import os
from sqlmodel import Session, select

# Add current directory to path
sys.path.append(os.getcwd())

from datenova.db.session import engine, init_db
from datenova.models.auth_models import AuthAccount
from datenova.models.user import User, UserRole
from datenova.core.security import get_password_hash


def create_initial_user(email: str, password: str, nombre: str) -> None:
    """
    Seed the first super-admin: a login account plus its profile. Everyone
    else joins through invitations.
    """
    print("--- Initial Super-Admin Creation ---")
    init_db()

    with Session(engine) as session:
        account = session.exec(select(AuthAccount).where(AuthAccount.email == email)).first()
        if account and session.get(User, account.id):
            print(f"User with email {email} already exists.")
            return

        if not account:
            print(f"Creating account {email}...")
            account = AuthAccount(email=email, password=get_password_hash(password))
            session.add(account)
            session.flush()

        session.add(User(
            id=account.id,
            email=email,
            nombre=nombre,
            rol=UserRole.SUPER_ADMIN.value,
        ))
        session.commit()
        print("Initial super-admin created successfully!")
        print(f"Email: {email}")
        print(f"Password: {password}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the first super-admin")
    parser.add_argument("--email", default="admin@datenova.com")
    parser.add_argument("--password", default="adminpassword")
    parser.add_argument("--nombre", default="Super Admin")
    args = parser.parse_args()
    create_initial_user(args.email.strip().lower(), args.password, args.nombre)
