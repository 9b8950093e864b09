"""
Centralized user-facing message formatting.

Everything the UI shows after a guild call comes from here: the generic
request-failure fallback, management-action labels, the confirmation prompt
and short success/error notices. Messages are Korean, matching the game UI.
"""

from utils.logging import get_logger
from utils.types import ManagementAction

logger = get_logger(__name__)

GENERIC_REQUEST_FAILURE = "API 요청에 실패했습니다."
NETWORK_FAILURE = "서버에 연결할 수 없습니다. 잠시 후 다시 시도해주세요."

ACTION_LABELS: dict[ManagementAction, str] = {
    ManagementAction.DELEGATE_MASTER: "길드장 위임",
    ManagementAction.APPOINT_SUBMASTER: "부길드장 임명",
    ManagementAction.DELEGATE_SUBMASTER: "부길드장 위임",
    ManagementAction.APPOINT_MANAGER: "매니저 임명",
    ManagementAction.DEMOTE_MANAGER: "매니저 해제",
    ManagementAction.KICK: "길드 추방",
}


def action_label(action: ManagementAction) -> str:
    """Display label for a management action."""
    return ACTION_LABELS.get(action, action.value)


def format_confirmation(nickname: str, action: ManagementAction) -> str:
    """Prompt shown before a management action is sent."""
    return f"'{nickname}' 님에게 [{action_label(action)}] 작업을 수행하시겠습니까?"


def format_user_error(code: str, **kwargs) -> str:
    """
    Format a user-friendly error message based on an error code.

    Args:
        code: Error code identifying the type of error
        **kwargs: Dynamic values to insert into error messages
            - action: Action label (for NOT_ALLOWED)

    Returns:
        User-friendly error message string

    Examples:
        >>> format_user_error("SELF_TARGET")
        '자기 자신에게는 관리 작업을 수행할 수 없습니다.'

        >>> format_user_error("NOT_ALLOWED", action="길드 추방")
        '[길드 추방] 작업을 수행할 권한이 없습니다.'
    """
    error_messages = {
        "REQUEST_FAILED": GENERIC_REQUEST_FAILURE,
        "NETWORK": NETWORK_FAILURE,
        "NOT_AUTHENTICATED": "로그인이 필요합니다.",
        "SELF_TARGET": "자기 자신에게는 관리 작업을 수행할 수 없습니다.",
        "NOT_ALLOWED": "[{action}] 작업을 수행할 권한이 없습니다.",
        "NO_ACTIONS": "수행할 수 있는 작업이 없습니다.",
        "ACTION_FAILED": "작업 처리에 실패했습니다.",
        "INVALID_TAG": "태그는 1~8자의 한글, 영문, 숫자만 사용할 수 있습니다.",
        "INVALID_NICKNAME": "특수문자나 공백은 사용할 수 없습니다.",
        "NICKNAME_LENGTH": "닉네임은 2~10글자여야 합니다.",
        "UNKNOWN": "알 수 없는 오류가 발생했습니다.",
    }

    if code not in error_messages:
        logger.warning(f"Unknown error code used in format_user_error: {code}")

    message = error_messages.get(code, error_messages["UNKNOWN"])

    try:
        return message.format(**kwargs)
    except KeyError as e:
        # Missing kwargs leave a visible placeholder rather than failing
        return message.replace("{" + str(e).strip("'") + "}", "???")


def format_user_success(code: str, **kwargs) -> str:
    """
    Format a user-friendly success message based on a success code.

    Examples:
        >>> format_user_success("ACTION_DONE")
        '성공적으로 처리되었습니다.'
    """
    success_messages = {
        "ACTION_DONE": "성공적으로 처리되었습니다.",
        "GUILD_CREATED": "길드 창설 완료!",
        "GUILD_JOINED": "길드 가입 성공! 환영합니다.",
        "NOTICE_UPDATED": "공지사항이 수정되었습니다.",
        "TAG_AVAILABLE": "사용 가능한 태그입니다.",
        "TAG_UPDATED": "태그가 변경되었습니다.",
        "NICKNAME_UPDATED": "닉네임이 변경되었습니다.",
        "RELOGIN_REQUIRED": "정보 갱신을 위해 다시 로그인해주세요.",
        "WELCOME": "환영합니다, {nickname}님!",
    }

    message = success_messages.get(code, "성공적으로 처리되었습니다.")

    try:
        return message.format(**kwargs)
    except KeyError:
        return "성공적으로 처리되었습니다."
