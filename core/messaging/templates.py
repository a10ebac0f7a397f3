"""
Member message templates

Bilingual (English / Telugu) WhatsApp texts for reminders, token numbers,
draw day and payment receipts. WhatsApp renders *text* as bold.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime

from core.constants import Defaults, WhatsAppDefaults
from core.domain.member import Member
from core.domain.months import MONTH_NAMES, display_name
from core.types import PaymentStatus
from core.utils.timezone import format_ist, now_ist, to_ist


# -----------------------------------------------------------------------------
# Formatting helpers
# -----------------------------------------------------------------------------

def format_phone_number(phone_number: str) -> str:
    """Digits only, with the country code

    "98765 43210" -> "919876543210"; anything that is neither 10 digits nor
    already prefixed is returned as bare digits.
    """
    cleaned = re.sub(r"\D", "", phone_number)
    code = WhatsAppDefaults.COUNTRY_CODE

    if len(cleaned) == 10:
        return f"{code}{cleaned}"
    return cleaned


def format_token(token_number: int | None) -> str:
    """7 -> "#07" """
    if token_number is None:
        return "N/A"
    return f"#{token_number:02d}"


def ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


@dataclass(frozen=True)
class DeadlineInfo:
    """Where today sits relative to the monthly payment deadline"""

    days_remaining: int
    deadline_date: date
    is_overdue: bool
    month_name: str


def deadline_info(
    now: datetime | None = None,
    deadline_day: int = Defaults.PAYMENT_DEADLINE_DAY,
) -> DeadlineInfo:
    """Days left until the deadline day (IST)

    Past the deadline day, the deadline moves to next month's and the
    current month counts as overdue.
    """
    today = to_ist(now).date() if now else now_ist().date()

    deadline = today.replace(day=deadline_day)
    is_overdue = today.day > deadline_day
    if is_overdue:
        if today.month == 12:
            deadline = deadline.replace(year=today.year + 1, month=1)
        else:
            deadline = deadline.replace(month=today.month + 1)

    return DeadlineInfo(
        days_remaining=max(0, (deadline - today).days),
        deadline_date=deadline,
        is_overdue=is_overdue,
        month_name=MONTH_NAMES[today.month - 1].capitalize(),
    )


# -----------------------------------------------------------------------------
# Templates
# -----------------------------------------------------------------------------

def reminder_message(
    member_name: str,
    overdue: bool = False,
    amount: int = Defaults.CONTRIBUTION_AMOUNT,
    deadline_day: int = Defaults.PAYMENT_DEADLINE_DAY,
    team_name: str = Defaults.TEAM_NAME,
    now: datetime | None = None,
) -> str:
    """Payment reminder

    The overdue variant is used when the member is marked overdue or the
    deadline day of the current month has passed.
    """
    info = deadline_info(now, deadline_day)

    if overdue or info.is_overdue:
        return (
            "🔴 *Payment Overdue Alert*\n"
            "\n"
            f"Dear {member_name},\n"
            "\n"
            f"Your payment for {info.month_name} is *OVERDUE*. "
            f"The deadline was {ordinal(deadline_day)} {info.month_name}.\n"
            "\n"
            "Please complete your payment immediately to avoid any inconvenience.\n"
            "\n"
            "Thank you for your prompt attention.\n"
            "\n"
            f"*{team_name}*"
        )

    pay_by = deadline_day - 1
    return (
        "⚠️ *PAYMENT REMINDER*\n"
        "\n"
        f"Respected {member_name},\n"
        "\n"
        f"You are kindly requested to pay the scheme amount of *₹{amount}* "
        f"on or before the *{ordinal(pay_by)}*.\n"
        f"On the *{ordinal(deadline_day)} at 7:00 PM*, the Scheme Draw will be conducted.\n"
        f"Those who have the opportunity may come directly to the shop, pay *₹{amount}*, "
        "and collect the receipt.\n"
        "\n"
        "-----------------------------------------------\n"
        "⚠️ *చెల్లింపు గుర్తు*\n"
        "\n"
        f"గౌరవనీయులైన {member_name} గారికి,\n"
        "\n"
        f"స్కీం తాలూకు కట్టవలసిన *₹{amount}* *{pay_by} తారీకు* లోపు "
        "చెల్లించవలసినదిగా కోరుచున్నాను.\n"
        f"*{deadline_day} వ తారీకు సాయంత్రము 7 గంటలకు* షాపులు డ్రా తీయబడును.\n"
        f"అవకాశం ఉన్నవాళ్లు షాపు దగ్గరికి వచ్చి *₹{amount}* కట్టి రసీదు "
        "తీసుకోవాల్సిందిగా కోరుచున్నాను.\n"
        "\n"
        f"*{team_name}*"
    )


def token_assignment_message(
    member_name: str,
    token_number: int,
    total_months: int = Defaults.TOTAL_MONTHS,
    team_name: str = Defaults.TEAM_NAME,
) -> str:
    """Permanent token number announcement"""
    return (
        "⚠️ *TOKEN NUMBER INFORMATION*\n"
        "\n"
        f"Respected {member_name},\n"
        "\n"
        f"Your scheme token number is *{token_number}*.\n"
        f"This token number will remain permanent for *{total_months} months*.\n"
        "The numbers will not change in between, and in the draw as well, "
        f"this same token number *{token_number}* will be considered.\n"
        "\n"
        "---------------------------------\n"
        "\n"
        f"గౌరవనీయులైన {member_name},\n"
        "\n"
        f"మీ యొక్క స్కీం టోకెన్ నెంబరు *{token_number}*.\n"
        "మీకు పంపించబడుతున్న ఈ టోకెన్ నంబరు ఇక పర్మనెంట్ గా "
        f"*{total_months} నెలలు* ఇదే నంబరు ఉంటుంది.\n"
        f"మధ్యలో నంబర్లు మారవు, డ్రాలో కూడా ఈ టోకెన్ నంబరు *{token_number}* తీయబడును.\n"
        "\n"
        f"*{team_name}*"
    )


def draw_reminder_message(team_name: str = Defaults.TEAM_NAME) -> str:
    """Same text for every member on draw day"""
    return (
        "⚠️ *SCHEME DRAW*\n"
        "\n"
        "Today at 7:00 PM there will be a draw with all the paid customers, "
        "please stay tuned and look forward for the results\n"
        "\n"
        "Hoping the best of luck for you\n"
        "\n"
        "-----------------------------------\n"
        "\n"
        "⚠️ స్కీమ్ డ్రా\n"
        "\n"
        "ఈరోజు సాయంత్రం 7:00 గంటలకు అన్ని పేమెంట్ చేసిన కస్టమర్స్ కోసం డ్రా ఉంటుంది.\n"
        "దయచేసి స్టే ట్యూన్ గా ఉండండి మరియు రిజల్ట్స్ కోసం వెయిట్ చేయండి.\n"
        "\n"
        "మీకు బెస్ట్ ఆఫ్ లక్!\n"
        "\n"
        f"*{team_name}*"
    )


def receipt_message(
    member: Member,
    month: str,
    scheme_name: str = Defaults.SCHEME_NAME,
    amount: int = Defaults.CONTRIBUTION_AMOUNT,
    now: datetime | None = None,
) -> str:
    """Payment receipt

    The payment date is the record's last update when paid, today otherwise.
    """
    now = now or now_ist()
    if member.payment_date is not None:
        payment_date = format_ist(member.payment_date)
    else:
        payment_date = format_ist(now, "%B %d, %Y")

    lines = [
        "📄 *PAYMENT RECEIPT*",
        "",
        f"*{scheme_name}*",
        "",
        f"*Token Number:* {format_token(member.token_number)}",
        f"*Member Name:* {member.full_name}",
        f"*Mobile:* {format_phone_number(member.mobile_number)}",
        f"*Family:* {member.family}",
        f"*Month:* {display_name(month)}",
        f"*Amount:* ₹{amount}",
        f"*Payment Status:* {member.payment_status.value.upper()}",
    ]
    if member.paid_to:
        lines.append(f"*Paid To:* {member.paid_to}")
    lines += [
        f"*Payment Date:* {payment_date}",
        "",
        "Thank you for your payment!",
        "",
        f"Generated on: {format_ist(now, '%d/%m/%Y')}",
        "",
        f"*{scheme_name}*",
        "This receipt serves as proof of payment.",
    ]
    return "\n".join(lines)


def is_receipt_eligible(member: Member) -> bool:
    return member.payment_status == PaymentStatus.PAID
