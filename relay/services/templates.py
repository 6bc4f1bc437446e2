"""
Texts the relay sends on its own behalf. Prompt texts come from the agent verbatim.
"""

INFO_TYPE_LABELS = {
    'email': 'email address',
    'address': 'full address',
    'account_number': 'account number',
}


def info_type_label(info_type: str) -> str:
    return INFO_TYPE_LABELS.get(info_type, 'information')


def error_sms(error_message: str) -> str:
    return (
        "That doesn't look right.\n\n"
        f"{error_message}\n\n"
        "Please reply again with the correct information."
    )


def timeout_sms() -> str:
    return (
        "This request has expired.\n\n"
        "If you're still on the call, ask the agent to send a new request."
    )


def invalid_sms(info_type: str) -> str:
    return (
        f"We couldn't verify your {info_type_label(info_type)}.\n\n"
        "If you're still on the call, ask the agent to send a new request."
    )
