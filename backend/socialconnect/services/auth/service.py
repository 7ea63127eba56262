"""
AuthService
===========

Account lifecycle and token issuance:

- Registration and username availability.
- Login by email or username, producing an access/refresh pair.
- Refresh, logout and password changes, all of which go through the
  refresh token store so revocation is immediate for refresh tokens.
- Password reset with a short-lived signed reset token.
"""

from __future__ import annotations

import hashlib
from datetime import timedelta

from sqlalchemy.exc import IntegrityError

from socialconnect.models.user import User
from socialconnect.services._shared.base import BaseService, ServiceContext
from socialconnect.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    violates,
)
from socialconnect.services._shared.policies.credentials import (
    check_password_policy,
    check_username,
)
from socialconnect.services._shared.ports import TokenDecodeError, TokenProvider
from socialconnect.services.auth.dto import (
    AccessTokenOut,
    AuthOut,
    LoginIn,
    PasswordChangeIn,
    PasswordResetConfirmIn,
    RegisterIn,
    TokenClaims,
    UsernameAvailabilityOut,
)
from socialconnect.services.auth.tokens import TokenService
from socialconnect.services.users.dto import ProfileOut, UserOut, UserStatsOut

RESET_TOKEN_TTL = timedelta(hours=1)
RESET_PURPOSE = "password_reset"


def _password_fingerprint(user: User) -> str:
    # Changes whenever the password does, which retires outstanding reset tokens.
    return hashlib.sha256(user.password_hash.encode("utf-8")).hexdigest()[:16]


class AuthService(BaseService):
    """
    Application service for authentication.

    :param tokens: Token policy, usually ``TokenService.from_config(app.config)``.
    :param reset_provider: Signer for reset tokens; defaults to ``tokens.provider``.
    """

    def __init__(
        self,
        tokens: TokenService,
        *,
        reset_provider: TokenProvider | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.tokens = tokens
        self.reset_provider = reset_provider or tokens.provider

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register(self, dto: RegisterIn) -> UserOut:
        """
        Register a new account.

        :raises ValidationError: On a malformed username or weak password.
        :raises ConflictError: When the email or username is taken.
        """
        check_username(dto.username)
        check_password_policy(dto.password)

        with self.rw_uow() as uow:
            if uow.users.exists_by_email(dto.email):
                raise ConflictError("User", "Email already registered")
            if uow.users.username_taken(dto.username):
                raise ConflictError("User", "Username already taken")

            user = User(
                email=dto.email,
                username=dto.username,
                first_name=dto.first_name.strip(),
                last_name=dto.last_name.strip(),
                email_verified=False,
            )
            user.password = dto.password
            try:
                uow.users.add(user)
            except IntegrityError as exc:
                # Concurrent registration won the race; the constraint is authoritative.
                if violates(exc, "uq_users_email", columns=("users.email",)):
                    raise ConflictError("User", "Email already registered") from exc
                if violates(exc, "uq_users_username", columns=("users.username",)):
                    raise ConflictError("User", "Username already taken") from exc
                raise

            self.log.info("user.registered", extra={"user_id": user.id})
            return UserOut.from_model(user)

    def username_availability(self, username: str) -> UsernameAvailabilityOut:
        try:
            check_username(username)
        except ValidationError as exc:
            return UsernameAvailabilityOut(available=False, error=exc.message)
        with self.ro_uow() as uow:
            return UsernameAvailabilityOut(available=not uow.users.username_taken(username))

    # --------------------------------------------------------------------- #
    # Sessions
    # --------------------------------------------------------------------- #

    def login(self, dto: LoginIn) -> AuthOut:
        """
        Verify credentials and issue a token pair.

        :raises AuthenticationError: On unknown identifier or wrong password.
        :raises AuthorizationError: When the account is deactivated.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_login(dto.identifier)
            if user is None or not user.verify_password(dto.password):
                raise AuthenticationError("Invalid credentials")
            if not user.is_active:
                raise AuthorizationError("Account is deactivated")

            uow.users.touch_last_login(user, self.now())
            claims = TokenClaims(
                user_id=user.id,
                email=user.email,
                username=user.username,
                is_admin=user.is_admin,
            )
            access = self.tokens.issue_access(claims)
            refresh = self.tokens.issue_refresh(claims, uow.refresh_tokens)
            counts = uow.users.relationship_counts(user.id)

            self.log.info("user.login", extra={"user_id": user.id})
            return AuthOut(
                user=UserOut.from_model(user),
                stats=UserStatsOut.from_counts(counts),
                access_token=access,
                refresh_token=refresh.token,
            )

    def refresh(self, refresh_token: str) -> AccessTokenOut:
        """
        Exchange a refresh token for a new access token.

        Order matters: signature first, then the stored record, then the owner.

        :raises ValidationError: When no token is supplied.
        :raises AuthenticationError: When any of the three checks fails.
        """
        if not refresh_token:
            raise ValidationError("Refresh token is required", field_name="refresh_token")

        claims = self.tokens.verify_refresh(refresh_token)
        if claims is None:
            raise AuthenticationError("Invalid refresh token")

        with self.ro_uow() as uow:
            record = uow.refresh_tokens.find_active(refresh_token)
            if record is None or record.user_id != claims.user_id:
                raise AuthenticationError("Refresh token is invalid or has been revoked")
            user = uow.users.get_active(claims.user_id)
            if user is None:
                raise AuthenticationError("User not found or inactive")
            fresh_claims = TokenClaims(
                user_id=user.id,
                email=user.email,
                username=user.username,
                is_admin=user.is_admin,
            )

        return AccessTokenOut(access_token=self.tokens.issue_access(fresh_claims))

    def logout(self, user_id: int, refresh_token: str | None) -> bool:
        """
        Blacklist the given refresh token.

        Tokens owned by another user are left untouched.

        :returns: ``True`` when a record was revoked.
        """
        if not refresh_token:
            return False
        claims = self.tokens.verify_refresh(refresh_token)
        if claims is not None and claims.user_id != user_id:
            return False
        with self.rw_uow() as uow:
            revoked = uow.refresh_tokens.blacklist_one(refresh_token)
        self.log.info("user.logout", extra={"user_id": user_id})
        return revoked

    # --------------------------------------------------------------------- #
    # Password lifecycle
    # --------------------------------------------------------------------- #

    def change_password(self, user_id: int, dto: PasswordChangeIn) -> int:
        """
        Replace the password and revoke every refresh token of the user.

        :returns: Number of refresh tokens revoked.
        :raises AuthenticationError: When ``current_password`` is wrong.
        """
        check_password_policy(dto.new_password)
        with self.rw_uow() as uow:
            user = uow.users.get_active(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            if not user.verify_password(dto.current_password):
                raise AuthenticationError("Current password is incorrect")
            user.password = dto.new_password
            uow.users.flush()
            revoked = uow.refresh_tokens.blacklist_all(user.id)
        self.log.info("user.password_changed", extra={"user_id": user_id})
        return revoked

    def request_password_reset(self, email: str) -> str | None:
        """
        Issue a reset token for ``email`` if an active account exists.

        The caller always answers with the same generic message; the token is
        returned for delivery by an out-of-band channel.

        :returns: The reset token, or ``None`` for unknown addresses.
        """
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None or not user.is_active:
                return None
            token = self.reset_provider.create_access_token(
                identity=str(user.id),
                additional_claims={
                    "purpose": RESET_PURPOSE,
                    "email": user.email,
                    "pwd": _password_fingerprint(user),
                },
                expires_delta=RESET_TOKEN_TTL,
            )
            self.log.info("user.password_reset_requested", extra={"user_id": user.id})
            return token

    def confirm_password_reset(self, dto: PasswordResetConfirmIn) -> int:
        """
        Set a new password using a reset token and revoke all refresh tokens.

        :raises ValidationError: On a weak password or any token mismatch.
        """
        check_password_policy(dto.new_password)
        invalid = ValidationError("Invalid reset token or email", field_name="reset_token")
        try:
            payload = self.reset_provider.decode(dto.reset_token)
        except TokenDecodeError as exc:
            raise invalid from exc
        if payload.get("purpose") != RESET_PURPOSE:
            raise invalid

        with self.rw_uow() as uow:
            user = uow.users.get_by_email(dto.email)
            if (
                user is None
                or str(user.id) != str(payload.get("sub"))
                or payload.get("pwd") != _password_fingerprint(user)
            ):
                raise invalid
            user.password = dto.new_password
            uow.users.flush()
            revoked = uow.refresh_tokens.blacklist_all(user.id)
        self.log.info("user.password_reset", extra={"user_id": user.id})
        return revoked

    # --------------------------------------------------------------------- #
    # Identity
    # --------------------------------------------------------------------- #

    def whoami(self, user_id: int) -> ProfileOut:
        """:raises NotFoundError: When the account vanished or was deactivated."""
        with self.ro_uow() as uow:
            user = uow.users.get_active(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            counts = uow.users.relationship_counts(user.id)
            return ProfileOut(user=UserOut.from_model(user), stats=UserStatsOut.from_counts(counts))
