"""FastAPI dependencies shared by the routers"""
from marketplace_billing.features.billing.payments import StripePaymentGateway
from marketplace_billing.features.billing.repositories.stripe_events import StripeEventRepository
from marketplace_billing.infra.supabase.client import get_supabase_client
from marketplace_billing.infra.supabase.repositories import RepositoryFactory


def get_repositories() -> RepositoryFactory:
    return RepositoryFactory(get_supabase_client())


def get_stripe_event_repository() -> StripeEventRepository:
    return StripeEventRepository(get_supabase_client())


def get_payment_gateway() -> StripePaymentGateway:
    return StripePaymentGateway()
