"""Scheduling repositories - appointments and host availability"""

from ...repository import CollectionRepository, Record


class AppointmentRepository(CollectionRepository):
    collection = "appointments"

    def for_host(self, host_id: str) -> list[Record]:
        return self.find(lambda a: a.get("hostId") == host_id)


class AvailabilityRepository(CollectionRepository):
    collection = "availability"
