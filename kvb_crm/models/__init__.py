# Models package - database models
from kvb_crm.models.user import Admin, Sales, Worker, Customer
from kvb_crm.models.product import Product
from kvb_crm.models.lead import Lead
from kvb_crm.models.quotation import Quotation
from kvb_crm.models.task import Task, TaskAssignment
from kvb_crm.models.enquiry import Enquiry
from kvb_crm.models.notification import EmailNotification
