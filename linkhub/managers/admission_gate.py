from dataclasses import dataclass

from linkhub.api.ws.constants import RejectReason
from linkhub.logging import logger
from linkhub.settings import app_settings
from linkhub.utils.deny_list import DenyList
from linkhub.utils.rate_limiter import RateLimiter


@dataclass(frozen=True)
class AdmissionDecision:
    admitted: bool
    reason: RejectReason | None = None

    @classmethod
    def admit(cls) -> "AdmissionDecision":
        return cls(admitted=True)

    @classmethod
    def reject(cls, reason: RejectReason) -> "AdmissionDecision":
        return cls(admitted=False, reason=reason)


def is_recognized_client(user_agent: str, allowed_labels: list[str]) -> bool:
    """Case-sensitive substring match against the allowed labels."""
    return any(label in user_agent for label in allowed_labels)


class AdmissionGate:
    """
    Decides whether an incoming link may be accepted.

    Checks run in order and short-circuit:
    1. Deny-list membership -> denied
    2. Rate limit quota -> rate_limited (absent addresses always fail)
    3. User-agent allow-list -> unrecognized_client

    A passed rate check is recorded even if the user-agent check then
    rejects, so rejected attempts still consume quota.
    """

    def __init__(
        self,
        deny_list: DenyList,
        rate_limiter: RateLimiter,
        allowed_user_agents: list[str] | None = None,
    ):
        self.deny_list = deny_list
        self.rate_limiter = rate_limiter
        self.allowed_user_agents = (
            allowed_user_agents
            if allowed_user_agents is not None
            else app_settings.ALLOWED_USER_AGENTS
        )

    def admit(
        self, address: str | None, user_agent: str | None
    ) -> AdmissionDecision:
        """
        Evaluate admission for one link attempt.

        Args:
            address: Resolved client address, None if unresolvable.
            user_agent: Raw User-Agent header value.

        Returns:
            AdmissionDecision with the reject reason, if any.
        """
        if self.deny_list.is_denied(address):
            logger.warning(f"[DENY-LIST] Refused address {address}")
            return AdmissionDecision.reject(RejectReason.DENIED)

        if not self.rate_limiter.allow(address):
            logger.warning(f"Rate limit exceeded for address {address}")
            return AdmissionDecision.reject(RejectReason.RATE_LIMITED)

        if not is_recognized_client(user_agent or "", self.allowed_user_agents):
            logger.warning(f"Unrecognized user agent: {user_agent!r}")
            return AdmissionDecision.reject(RejectReason.UNRECOGNIZED_CLIENT)

        return AdmissionDecision.admit()
