from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from stablehub.core.config import settings
from stablehub.application.ports.email_sender import EmailSenderPort
from stablehub.application.ports.payment_verifier import PaymentVerifierPort
from stablehub.application.ports.proof_storage import ProofStoragePort
from stablehub.application.use_cases.admin import AdminService
from stablehub.application.use_cases.booking_lifecycle import BookingLifecycleUseCase
from stablehub.application.use_cases.cart import CartUseCase
from stablehub.application.use_cases.checkout import CheckoutUseCase
from stablehub.application.use_cases.customers import CustomerUseCase
from stablehub.application.use_cases.notifications import NotificationUseCase
from stablehub.application.use_cases.order_lifecycle import OrderLifecycleUseCase
from stablehub.application.use_cases.verify_payment import PaymentProofGate
from stablehub.infrastructure.email.emailjs_client import EmailJSClient
from stablehub.infrastructure.email.mock_email import MockEmailSender
from stablehub.infrastructure.storage.local_proof_storage import LocalProofStorage
from stablehub.infrastructure.store.json_store import JsonStore
from stablehub.infrastructure.store.memory_store import (
    MemoryCartStore,
    MemoryCatalog,
    MemoryCustomerDirectory,
    MemoryOrderLedger,
    MemoryReservationLedger,
    MemoryStore,
)
from stablehub.infrastructure.store.seed_data import seed
from stablehub.infrastructure.verification.mock_verifier import MockPaymentVerifier
from stablehub.infrastructure.verification.openai_verifier import OpenAIPaymentVerifier


_store: MemoryStore | None = None


def get_store() -> MemoryStore:
    global _store
    if _store is None:
        if settings.STORE_PROVIDER.lower() == "json":
            _store = JsonStore(data_dir=settings.DATA_DIR)
        else:
            _store = MemoryStore()
        seed(_store)
    return _store


def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


def get_reservation_ledger() -> MemoryReservationLedger:
    return MemoryReservationLedger(get_store())


def get_order_ledger() -> MemoryOrderLedger:
    return MemoryOrderLedger(get_store())


def get_catalog() -> MemoryCatalog:
    return MemoryCatalog(get_store())


def get_customer_directory() -> MemoryCustomerDirectory:
    return MemoryCustomerDirectory(get_store())


def get_cart_store() -> MemoryCartStore:
    return MemoryCartStore(get_store())


@lru_cache
def get_payment_verifier() -> PaymentVerifierPort:
    if settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.strip():
        return OpenAIPaymentVerifier()
    return MockPaymentVerifier()


@lru_cache
def get_email_sender() -> EmailSenderPort:
    logger = logging.getLogger(__name__)
    if not (settings.EMAILJS_SERVICE_ID and settings.EMAILJS_TEMPLATE_ID and settings.EMAILJS_PUBLIC_KEY):
        if settings.ENV.lower() in {"dev", "local", "test"}:
            logger.info("Using MockEmailSender (EmailJS not configured, ENV=%s)", settings.ENV)
            return MockEmailSender()
        raise ValueError("EMAILJS_SERVICE_ID, EMAILJS_TEMPLATE_ID and EMAILJS_PUBLIC_KEY are required to send email.")

    logger.info("Using EmailJS sender")
    return EmailJSClient(
        service_id=settings.EMAILJS_SERVICE_ID,
        template_id=settings.EMAILJS_TEMPLATE_ID,
        public_key=settings.EMAILJS_PUBLIC_KEY,
        private_key=settings.EMAILJS_PRIVATE_KEY,
        send_endpoint=settings.EMAILJS_SEND_ENDPOINT,
    )


@lru_cache
def get_proof_storage() -> ProofStoragePort:
    return LocalProofStorage(
        root_dir=settings.PROOF_STORAGE_DIR,
        public_base_url=settings.PROOF_PUBLIC_BASE_URL,
    )


def get_booking_use_case() -> BookingLifecycleUseCase:
    return BookingLifecycleUseCase(
        ledger=get_reservation_ledger(),
        catalog=get_catalog(),
        timezone=get_timezone(),
        limited_threshold=settings.LIMITED_THRESHOLD,
    )


def get_order_use_case() -> OrderLifecycleUseCase:
    return OrderLifecycleUseCase(ledger=get_order_ledger(), timezone=get_timezone())


def get_cart_use_case() -> CartUseCase:
    return CartUseCase(store=get_cart_store(), catalog=get_catalog())


def get_customer_use_case() -> CustomerUseCase:
    return CustomerUseCase(directory=get_customer_directory(), timezone=get_timezone())


def get_notification_use_case() -> NotificationUseCase:
    return NotificationUseCase(
        sender=get_email_sender(),
        proofs=get_proof_storage(),
        operator_email=settings.OPERATOR_EMAIL,
        timezone=get_timezone(),
    )


@lru_cache
def get_checkout_use_case() -> CheckoutUseCase:
    # single instance: holds the in-flight submission set
    return CheckoutUseCase(
        catalog=get_catalog(),
        bookings=get_booking_use_case(),
        orders=get_order_use_case(),
        carts=get_cart_use_case(),
        gate=PaymentProofGate(verifier=get_payment_verifier()),
        proofs=get_proof_storage(),
        notifications=get_notification_use_case(),
        max_proof_bytes=settings.MAX_PROOF_BYTES,
        default_pickup_location=settings.DEFAULT_PICKUP_LOCATION,
    )


def get_admin_service() -> AdminService:
    return AdminService(
        orders=get_order_ledger(),
        reservations=get_reservation_ledger(),
        catalog=get_catalog(),
        customers=get_customer_directory(),
        admin_emails=settings.admin_emails(),
        timezone=get_timezone(),
    )
