"""
Enumerations for bookings, users and translator matching.

Values are the exact strings stored in the database and accepted by the API.
All of them inherit from str, so FastAPI validates and serializes them and
SQLAlchemy columns can hold `.value` directly.
"""

import enum


class JobStatus(str, enum.Enum):
    PENDING = "pending"                  # waiting for a translator to accept
    ASSIGNED = "assigned"                # a translator holds the booking
    STARTED = "started"                  # the session is under way
    COMPLETED = "completed"              # session finished, billable
    TIMEDOUT = "timedout"                # nobody accepted before expiry
    WITHDRAWBEFORE24 = "withdrawbefore24"  # customer cancelled with >= 24h notice
    WITHDRAWAFTER24 = "withdrawafter24"    # customer cancelled with < 24h notice
    NOT_CARRIED_OUT_CUSTOMER = "not_carried_out_customer"  # customer never showed up


class JobType(str, enum.Enum):
    PAID = "paid"
    RWS = "rws"
    UNPAID = "unpaid"


class Certification(str, enum.Enum):
    YES = "yes"
    BOTH = "both"
    LAW = "law"
    N_LAW = "n_law"
    HEALTH = "health"
    N_HEALTH = "n_health"
    NORMAL = "normal"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"


class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    TRANSLATOR = "translator"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPERADMIN})


class TranslatorType(str, enum.Enum):
    PROFESSIONAL = "professional"    # takes paid bookings
    RWS = "rwstranslator"            # takes rws bookings
    VOLUNTEER = "volunteer"          # takes unpaid bookings


class TranslatorLevel(str, enum.Enum):
    CERTIFIED = "Certified"
    CERTIFIED_LAW = "Certified with specialisation in law"
    CERTIFIED_HEALTH = "Certified with specialisation in health care"
    LAYMAN = "Layman"
    TRANSLATION_COURSES = "Read Translation courses"
