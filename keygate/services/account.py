"""Account service.

Profile display and the email verification flow. Resending the
verification email is throttled per account by a Cooldown.
"""

from __future__ import annotations

import secrets
from urllib.parse import urlencode

import structlog

from keygate.errors import EmailDeliveryError
from keygate.repositories.base import ApiKeyRepository
from keygate.services import key_codec, plans
from keygate.services.cooldown import Cooldown
from keygate.services.email import EmailSender, templates
from keygate.services.results import FailureKind, ProfileView, ServiceResult

logger = structlog.get_logger()

CONFIRMATION_SUBJECT = "Confirm Your Email - World Cup API"


class AccountService:
    """Profile and email verification operations for one account."""

    def __init__(
        self,
        repository: ApiKeyRepository,
        email_sender: EmailSender,
        cooldown: Cooldown,
    ) -> None:
        self._repo = repository
        self._email = email_sender
        self._cooldown = cooldown
        self._log = logger.bind(service="account")

    async def get_profile(self, account_id: str) -> ProfileView | None:
        account = await self._repo.get_account(account_id)
        if account is None:
            self._log.warning("account.not_found", account_id=account_id)
            return None

        limits = plans.get_plan(account.plan)
        return ProfileView(
            id=account.id,
            email=account.email,
            first_name=account.first_name,
            last_name=account.last_name,
            plan=limits.plan,
            email_confirmed=account.email_confirmed,
            created_at=account.created_at,
            api_key_count=await self._repo.count_active(account.id),
            max_api_keys=limits.max_api_keys,
            max_monthly_requests=limits.monthly_request_limit,
        )

    async def update_profile(
        self,
        account_id: str,
        first_name: str,
        last_name: str,
    ) -> ServiceResult:
        """Replace the account's first and last name."""
        account = await self._repo.get_account(account_id)
        if account is None:
            return ServiceResult.fail("User not found.", FailureKind.NOT_FOUND)

        account.first_name = first_name.strip()
        account.last_name = last_name.strip()
        await self._repo.save_account(account)

        self._log.info("account.profile.updated", account_id=account_id)
        return ServiceResult.ok("Profile updated successfully!")

    async def resend_confirmation(self, account_id: str, base_url: str) -> ServiceResult:
        """Send a fresh verification email unless the cooldown is active.

        The cooldown slot is claimed before sending and released again if
        anything after the claim fails, so only a sent email holds it.
        """
        account = await self._repo.get_account(account_id)
        if account is None:
            return ServiceResult.fail("User not found.", FailureKind.NOT_FOUND)

        if account.email_confirmed:
            return ServiceResult.fail("Email is already confirmed.", FailureKind.INVALID)

        attempt = self._cooldown.try_consume(account_id)
        if not attempt.allowed:
            return ServiceResult.fail(
                f"Please wait {attempt.remaining_minutes} minute(s) "
                "before requesting another confirmation email.",
                FailureKind.RATE_LIMITED,
                retry_after=attempt.remaining,
            )

        try:
            token = secrets.token_urlsafe(32)
            account.email_confirmation_token_hash = key_codec.hash_key(token)
            await self._repo.save_account(account)

            query = urlencode({"userId": account_id, "token": token})
            link = f"{base_url.rstrip('/')}/account/confirm-email?{query}"

            await self._email.send(
                account.email,
                CONFIRMATION_SUBJECT,
                templates.email_confirmation(account.first_name, link),
            )
        except EmailDeliveryError:
            self._cooldown.release(account_id)
            self._log.exception(
                "account.confirmation.send_failed",
                account_id=account_id,
                transport=self._email.name,
            )
            return ServiceResult.fail(
                "Failed to send confirmation email. Please try again later.",
                FailureKind.UNAVAILABLE,
            )
        except BaseException:
            self._cooldown.release(account_id)
            raise

        self._log.info("account.confirmation.sent", account_id=account_id)
        return ServiceResult.ok("Confirmation email sent! Please check your inbox.")

    async def confirm_email(self, account_id: str, token: str) -> ServiceResult:
        account = await self._repo.get_account(account_id)
        if account is None:
            return ServiceResult.fail("User not found.", FailureKind.NOT_FOUND)

        if account.email_confirmed:
            return ServiceResult.ok("Email is already confirmed.")

        stored = account.email_confirmation_token_hash
        if not stored or not key_codec.verify_key(token, stored):
            self._log.warning("account.confirmation.invalid_token", account_id=account_id)
            return ServiceResult.fail(
                "Email confirmation failed. The link may be expired.",
                FailureKind.INVALID,
            )

        account.email_confirmed = True
        account.email_confirmation_token_hash = None
        await self._repo.save_account(account)

        self._log.info("account.confirmation.confirmed", account_id=account_id)
        return ServiceResult.ok("Email confirmed successfully!")
