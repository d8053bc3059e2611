from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from oauth_sqlstore.db.base import Base


class OAuthClient(Base):
    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    # Fernet ciphertext when ENCRYPTION_KEY is set
    secret: Mapped[str] = mapped_column(Text, nullable=False, default="")
    redirect_uri: Mapped[str] = mapped_column(Text, nullable=False, default="")
    user_data: Mapped[str] = mapped_column(Text, nullable=False, default="")
