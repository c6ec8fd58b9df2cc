"""
Initialise a demo setup
Enrolls a demo participant and prints its token plus bearer tokens for each role
"""
import asyncio

from qrwallet.core.container import get_container
from qrwallet.core.exceptions import AccountAlreadyEnrolledError
from qrwallet.core.security import create_access_token
from qrwallet.infrastructure.database.session import init_db
from qrwallet.modules.movements import ActorRole

DEMO_ACCOUNT_ID = "demo-participant-001"


async def create_demo_setup():
    """Enroll the demo participant and print bearer tokens"""
    container = get_container()
    await init_db(container.engine)

    coordinator = container.transfer_coordinator()
    try:
        enrollment = await coordinator.enroll(DEMO_ACCOUNT_ID)
    except AccountAlreadyEnrolledError:
        print(f"Demo participant {DEMO_ACCOUNT_ID} already enrolled")
    else:
        print("=" * 50)
        print(f"Participant: {enrollment.account_id}")
        print(f"Token:       {enrollment.token}")
        print("=" * 50)

    for actor_id, role in (
        ("demo-admin", ActorRole.ADMIN),
        ("demo-verifier", ActorRole.VERIFYING_OFFICER),
        ("demo-service", ActorRole.SERVICE_OFFICER),
        (DEMO_ACCOUNT_ID, ActorRole.PARTICIPANT),
    ):
        token = create_access_token(actor_id, role, settings=container.settings)
        print(f"{role.value} bearer token: {token}")
    print("=" * 50)

    await container.dispose()


if __name__ == "__main__":
    asyncio.run(create_demo_setup())
