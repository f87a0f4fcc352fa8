"""
Dashboard service - admin overview counts.
"""
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.repositories.lead_repo import LeadRepository
from kvb_crm.repositories.product_repo import ProductRepository
from kvb_crm.repositories.quotation_repo import QuotationRepository
from kvb_crm.repositories.task_repo import TaskRepository
from kvb_crm.repositories.user_repo import CustomerRepository, WorkerRepository, SalesRepository


class DashboardService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_stats(self) -> dict:
        """Totals per collection and status breakdowns for tasks, leads and quotations."""
        task_repo = TaskRepository(self.session)
        lead_repo = LeadRepository(self.session)
        quotation_repo = QuotationRepository(self.session)

        return {
            "overview": {
                "total_customers": await CustomerRepository(self.session).count(),
                "total_workers": await WorkerRepository(self.session).count(),
                "total_sales": await SalesRepository(self.session).count(),
                "total_products": await ProductRepository(self.session).count(),
                "total_tasks": await task_repo.count(),
                "total_leads": await lead_repo.count(),
                "total_quotations": await quotation_repo.count(),
            },
            "task_stats": await task_repo.count_by_status(),
            "lead_stats": await lead_repo.count_by_status(),
            "quotation_stats": await quotation_repo.count_by_status(),
        }
