from .auth import CodeForm, PasswordResetForm, SignUpForm
from .commission import CommissionPaymentForm, DisputeForm
from .messaging import MessageForm
from .profile import ProfileForm
from .property import PropertyForm, PropertyMediaForm
from .reservation import CancellationForm, MobileMoneyForm, ReservationForm
from .review import ReviewForm
from .verification import DocumentUploadForm, VerificationDetailsForm
from .wallet import WithdrawalForm

__all__ = [
    "SignUpForm",
    "CodeForm",
    "PasswordResetForm",
    "ProfileForm",
    "PropertyForm",
    "PropertyMediaForm",
    "ReservationForm",
    "MobileMoneyForm",
    "CancellationForm",
    "WithdrawalForm",
    "MessageForm",
    "ReviewForm",
    "CommissionPaymentForm",
    "DisputeForm",
    "VerificationDetailsForm",
    "DocumentUploadForm",
]
