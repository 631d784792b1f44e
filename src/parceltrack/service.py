"""
Parcel workflow for parceltrack.

ParcelService sits on top of ParcelStore and adds the one piece of business
logic the store deliberately leaves out: moving a parcel along its status
chain.

Status Chain:
    registered -> sent -> delivered

Address changes and deletions keep the store's semantics: when the parcel
is past registered (or doesn't exist) they quietly do nothing.
"""

import logging

from parceltrack.errors import InvalidStatusTransitionError
from parceltrack.schema import Parcel, ParcelStatus, now_rfc3339
from parceltrack.store import ParcelStore

logger = logging.getLogger(__name__)

NEXT_STATUS: dict[str, ParcelStatus] = {
    ParcelStatus.REGISTERED.value: ParcelStatus.SENT,
    ParcelStatus.SENT.value: ParcelStatus.DELIVERED,
}


class ParcelService:
    """
    Registration and status workflow for parcels.

    Usage:
        service = ParcelService(ParcelStore(conn))
        parcel = service.register(client=1000, address="Main st. 1")
        service.next_status(parcel.number)
    """

    def __init__(self, store: ParcelStore) -> None:
        self.store = store

    def register(self, client: int, address: str) -> Parcel:
        """
        Register a new parcel for a client.

        Returns:
            The stored parcel, with its assigned number
        """
        parcel = Parcel(
            client=client,
            address=address,
            status=ParcelStatus.REGISTERED,
            created_at=now_rfc3339(),
        )
        number = self.store.add(parcel)
        logger.info(
            "Registered parcel %d for client %d, address %s",
            number,
            client,
            address,
        )
        return parcel.model_copy(update={"number": number})

    def client_parcels(self, client: int) -> list[Parcel]:
        """Return every parcel belonging to a client."""
        return self.store.get_by_client(client)

    def next_status(self, number: int) -> str:
        """
        Advance a parcel to the next status in the chain.

        Returns:
            The new status

        Raises:
            ParcelNotFoundError: If the parcel doesn't exist
            InvalidStatusTransitionError: If the parcel is delivered or its
                status isn't part of the chain
        """
        parcel = self.store.get(number)
        next_status = NEXT_STATUS.get(parcel.status)
        if next_status is None:
            raise InvalidStatusTransitionError(number=number, status=parcel.status)

        self.store.set_status(number, next_status)
        logger.info("Parcel %d: %s -> %s", number, parcel.status, next_status.value)
        return next_status.value

    def change_address(self, number: int, address: str) -> None:
        """Change the address of a registered parcel."""
        self.store.set_address(number, address)
        logger.info("Requested address change for parcel %d", number)

    def delete(self, number: int) -> None:
        """Delete a registered parcel."""
        self.store.delete(number)
        logger.info("Requested deletion of parcel %d", number)
