"""Report repositories - reports and their progress updates"""

from ...repository import CollectionRepository, Record


class ReportRepository(CollectionRepository):
    collection = "reports"


class ReportUpdateRepository(CollectionRepository):
    collection = "report-updates"

    def for_report(self, report_id: str) -> list[Record]:
        return self.find(lambda u: u.get("reportId") == report_id)

    def delete_for_report(self, report_id: str) -> int:
        with self.store.lock(self.collection):
            items = self.store.read(self.collection)
            remaining = [u for u in items if u.get("reportId") != report_id]
            removed = len(items) - len(remaining)
            if removed:
                self.store.write(self.collection, remaining)
        return removed
