"""Demo records written into an empty store on first use."""

from datetime import timedelta
from decimal import Decimal
from typing import List, Sequence, Tuple

from ..models.common import Address, utcnow
from ..models.customer import Customer, CustomerStatus, CustomerType
from ..models.financial import Estimate, EstimateItem, EstimateStatus, FinancialDefaults, Invoice, InvoiceItem, InvoiceStatus
from ..models.lead import Lead, LeadPriority, LeadSource, LeadStatus
from ..models.project import Project, ProjectPriority, ProjectStatus, ProjectTask, ProjectType, TaskPriority, TaskStatus
from ..models.staff import EmploymentType, Staff, StaffStatus


def sample_customers() -> List[Customer]:
    now = utcnow()
    return [
        Customer(
            first_name="John",
            last_name="Doe",
            email="john.doe@example.com",
            phone="+1 (555) 123-4567",
            company="ABC Corporation",
            job_title="CEO",
            status=CustomerStatus.ACTIVE,
            type=CustomerType.BUSINESS,
            address=Address(street="123 Main St", city="New York", state="NY", postal_code="10001", country="USA"),
            total_revenue=Decimal("125000"),
            project_count=3,
            last_contact_date=now - timedelta(days=5),
            tags=["VIP", "Enterprise"],
        ),
        Customer(
            first_name="Jane",
            last_name="Smith",
            email="jane.smith@techcorp.com",
            phone="+1 (555) 987-6543",
            company="TechCorp Solutions",
            job_title="CTO",
            status=CustomerStatus.ACTIVE,
            type=CustomerType.BUSINESS,
            address=Address(street="456 Tech Ave", city="San Francisco", state="CA", postal_code="94105", country="USA"),
            total_revenue=Decimal("89000"),
            project_count=2,
            last_contact_date=now - timedelta(days=12),
            tags=["Technology", "Recurring"],
        ),
        Customer(
            first_name="Michael",
            last_name="Johnson",
            email="m.johnson@email.com",
            phone="+1 (555) 456-7890",
            job_title="Freelancer",
            status=CustomerStatus.PROSPECT,
            type=CustomerType.INDIVIDUAL,
            address=Address(street="789 Oak St", city="Chicago", state="IL", postal_code="60601", country="USA"),
            total_revenue=Decimal("15000"),
            project_count=1,
            last_contact_date=now - timedelta(days=3),
            tags=["Individual", "Small Project"],
        ),
    ]


def sample_staff() -> List[Staff]:
    now = utcnow()
    return [
        Staff(
            first_name="Alice",
            last_name="Johnson",
            email="alice.johnson@company.com",
            phone="+1 (555) 123-4567",
            job_title="Senior Developer",
            department="Engineering",
            status=StaffStatus.ACTIVE,
            hire_date=now - timedelta(days=730),
            salary=Decimal("95000"),
            employment_type=EmploymentType.FULL_TIME,
            address=Address(street="123 Tech Street", city="San Francisco", state="CA", postal_code="94105", country="USA"),
            skills=["C#", "Blazor", "JavaScript", "SQL"],
            vacation_days_used=8,
            vacation_days_total=25,
        ),
        Staff(
            first_name="Bob",
            last_name="Smith",
            email="bob.smith@company.com",
            phone="+1 (555) 987-6543",
            job_title="Sales Manager",
            department="Sales",
            status=StaffStatus.ACTIVE,
            hire_date=now - timedelta(days=1095),
            salary=Decimal("85000"),
            employment_type=EmploymentType.FULL_TIME,
            address=Address(street="456 Business Ave", city="New York", state="NY", postal_code="10001", country="USA"),
            skills=["Sales", "CRM", "Negotiation", "Lead Generation"],
            vacation_days_used=12,
        ),
        Staff(
            first_name="Carol",
            last_name="Davis",
            email="carol.davis@company.com",
            phone="+1 (555) 456-7890",
            job_title="Project Manager",
            department="Operations",
            status=StaffStatus.ACTIVE,
            hire_date=now - timedelta(days=365),
            salary=Decimal("78000"),
            employment_type=EmploymentType.FULL_TIME,
            address=Address(street="789 Management Blvd", city="Chicago", state="IL", postal_code="60601", country="USA"),
            skills=["Project Management", "Agile", "Scrum", "Team Leadership"],
            vacation_days_used=5,
        ),
        Staff(
            first_name="David",
            last_name="Wilson",
            email="david.wilson@company.com",
            phone="+1 (555) 321-0987",
            job_title="UX Designer",
            department="Design",
            status=StaffStatus.ON_LEAVE,
            hire_date=now - timedelta(days=240),
            salary=Decimal("72000"),
            employment_type=EmploymentType.FULL_TIME,
            address=Address(street="321 Creative Lane", city="Austin", state="TX", postal_code="73301", country="USA"),
            skills=["UI/UX Design", "Figma", "Adobe Creative Suite", "User Research"],
            vacation_days_used=15,
        ),
    ]


def sample_leads(staff: Sequence[Staff]) -> List[Lead]:
    now = utcnow()
    owner_id = staff[0].id if staff else None
    return [
        Lead(
            first_name="Sarah",
            last_name="Wilson",
            email="sarah.wilson@techstartup.com",
            phone="+1 (555) 234-5678",
            company="TechStartup Inc",
            job_title="CTO",
            status=LeadStatus.QUALIFIED,
            source=LeadSource.WEBSITE,
            priority=LeadPriority.HIGH,
            estimated_value=Decimal("45000"),
            expected_close_date=now + timedelta(days=15),
            project_description="Custom e-commerce platform development",
            requirements="Multi-vendor marketplace with payment integration",
            budget="$40,000 - $50,000",
            timeline="3-4 months",
            tags=["Hot Lead", "E-commerce", "High Value"],
            assigned_to_staff_id=owner_id,
            last_contact_date=now - timedelta(days=2),
            next_follow_up_date=now + timedelta(days=1),
            created_at=now - timedelta(days=7),
        ),
        Lead(
            first_name="Michael",
            last_name="Chen",
            email="m.chen@consulting.com",
            phone="+1 (555) 345-6789",
            company="Chen Consulting",
            job_title="Managing Partner",
            status=LeadStatus.PROPOSAL,
            source=LeadSource.REFERRAL,
            priority=LeadPriority.MEDIUM,
            estimated_value=Decimal("25000"),
            expected_close_date=now + timedelta(days=30),
            project_description="Business process automation system",
            requirements="Workflow automation and document management",
            budget="$20,000 - $30,000",
            timeline="2-3 months",
            tags=["Consulting", "Automation"],
            assigned_to_staff_id=owner_id,
            last_contact_date=now - timedelta(days=5),
            next_follow_up_date=now + timedelta(days=3),
            created_at=now - timedelta(days=14),
        ),
        Lead(
            first_name="Emily",
            last_name="Rodriguez",
            email="emily@localrestaurant.com",
            phone="+1 (555) 456-7890",
            company="Local Restaurant Group",
            job_title="Operations Manager",
            status=LeadStatus.NEW,
            source=LeadSource.SOCIAL_MEDIA,
            priority=LeadPriority.LOW,
            estimated_value=Decimal("8000"),
            expected_close_date=now + timedelta(days=45),
            project_description="Restaurant website and online ordering",
            requirements="Simple website with online menu and ordering system",
            budget="$5,000 - $10,000",
            timeline="1-2 months",
            tags=["Small Business", "Website"],
            next_follow_up_date=now + timedelta(days=1),
            created_at=now - timedelta(days=3),
        ),
        Lead(
            first_name="David",
            last_name="Thompson",
            email="david.thompson@enterprise.com",
            phone="+1 (555) 567-8901",
            company="Enterprise Solutions Ltd",
            job_title="IT Director",
            status=LeadStatus.NEGOTIATION,
            source=LeadSource.TRADE_SHOW,
            priority=LeadPriority.CRITICAL,
            estimated_value=Decimal("120000"),
            expected_close_date=now + timedelta(days=10),
            project_description="Enterprise resource planning system",
            requirements="Custom ERP with integration to existing systems",
            budget="$100,000 - $150,000",
            timeline="6-8 months",
            tags=["Enterprise", "ERP", "High Value", "Critical"],
            assigned_to_staff_id=owner_id,
            last_contact_date=now - timedelta(days=1),
            next_follow_up_date=now + timedelta(days=2),
            created_at=now - timedelta(days=21),
        ),
        Lead(
            first_name="Lisa",
            last_name="Anderson",
            email="lisa@nonprofit.org",
            phone="+1 (555) 678-9012",
            company="Community Nonprofit",
            job_title="Executive Director",
            status=LeadStatus.LOST,
            source=LeadSource.EMAIL_MARKETING,
            priority=LeadPriority.LOW,
            estimated_value=Decimal("12000"),
            expected_close_date=now - timedelta(days=10),
            project_description="Donor management system",
            requirements="Simple CRM for donor tracking and communications",
            budget="$10,000 - $15,000",
            timeline="2-3 months",
            tags=["Nonprofit", "CRM"],
            last_contact_date=now - timedelta(days=15),
            created_at=now - timedelta(days=30),
        ),
    ]


def sample_projects(customers: Sequence[Customer], staff: Sequence[Staff]) -> Tuple[List[Project], List[ProjectTask]]:
    """Three demo projects plus the tasks that belong to them."""
    if not customers or not staff:
        return [], []
    now = utcnow()
    first_customer = customers[0]
    second_customer = customers[1] if len(customers) > 1 else first_customer
    manager = staff[0]
    developer = staff[1] if len(staff) > 1 else manager
    year = now.year

    redesign = Project(
        name="E-commerce Website Redesign",
        description="Complete redesign of the company's e-commerce platform with modern UI/UX and improved performance",
        project_code=f"PRJ-{year}-0001",
        status=ProjectStatus.IN_PROGRESS,
        priority=ProjectPriority.HIGH,
        type=ProjectType.DEVELOPMENT,
        customer_id=first_customer.id,
        project_manager_id=manager.id,
        team_member_ids=[member.id for member in staff[:3]],
        start_date=now - timedelta(days=30),
        end_date=now + timedelta(days=45),
        budget=Decimal("85000"),
        actual_cost=Decimal("42000"),
        estimated_hours=680,
        actual_hours=340,
        progress_percentage=Decimal("65"),
        tags=["E-commerce", "Web Development", "UI/UX"],
        created_at=now - timedelta(days=35),
    )
    mobile = Project(
        name="Mobile App Development",
        description="Native iOS and Android application for customer portal",
        project_code=f"PRJ-{year}-0002",
        status=ProjectStatus.PLANNING,
        priority=ProjectPriority.MEDIUM,
        type=ProjectType.DEVELOPMENT,
        customer_id=second_customer.id,
        project_manager_id=manager.id,
        team_member_ids=[member.id for member in staff[:2]],
        start_date=now + timedelta(days=7),
        end_date=now + timedelta(days=120),
        budget=Decimal("120000"),
        actual_cost=Decimal("5000"),
        estimated_hours=960,
        actual_hours=40,
        progress_percentage=Decimal("15"),
        tags=["Mobile App", "iOS", "Android"],
        created_at=now - timedelta(days=10),
    )
    migration = Project(
        name="Legacy System Migration",
        description="Migrate legacy database and applications to modern cloud infrastructure",
        project_code=f"PRJ-{year}-0003",
        status=ProjectStatus.COMPLETED,
        priority=ProjectPriority.CRITICAL,
        type=ProjectType.DEVELOPMENT,
        customer_id=first_customer.id,
        project_manager_id=manager.id,
        team_member_ids=[member.id for member in staff],
        start_date=now - timedelta(days=90),
        end_date=now - timedelta(days=10),
        actual_start_date=now - timedelta(days=88),
        actual_end_date=now - timedelta(days=8),
        budget=Decimal("150000"),
        actual_cost=Decimal("145000"),
        estimated_hours=1200,
        actual_hours=1180,
        progress_percentage=Decimal("100"),
        tags=["Migration", "Cloud", "Database"],
        created_at=now - timedelta(days=95),
    )

    tasks = [
        ProjectTask(
            project_id=redesign.id,
            title="Requirements Analysis",
            description="Gather and analyze business requirements",
            status=TaskStatus.COMPLETED,
            priority=TaskPriority.HIGH,
            assigned_to_id=manager.id,
            estimated_hours=40,
            actual_hours=38,
            progress_percentage=Decimal("100"),
            completed_date=now - timedelta(days=25),
            created_at=now - timedelta(days=35),
        ),
        ProjectTask(
            project_id=redesign.id,
            title="UI/UX Design",
            description="Create wireframes and visual designs",
            status=TaskStatus.COMPLETED,
            priority=TaskPriority.HIGH,
            assigned_to_id=developer.id,
            estimated_hours=80,
            actual_hours=85,
            progress_percentage=Decimal("100"),
            completed_date=now - timedelta(days=15),
            created_at=now - timedelta(days=34),
        ),
        ProjectTask(
            project_id=redesign.id,
            title="Frontend Development",
            description="Implement responsive frontend components",
            status=TaskStatus.IN_PROGRESS,
            priority=TaskPriority.HIGH,
            assigned_to_id=developer.id,
            estimated_hours=200,
            actual_hours=120,
            progress_percentage=Decimal("60"),
            due_date=now + timedelta(days=20),
            created_at=now - timedelta(days=33),
        ),
        ProjectTask(
            project_id=mobile.id,
            title="Project Planning",
            description="Define project scope and timeline",
            status=TaskStatus.IN_PROGRESS,
            priority=TaskPriority.HIGH,
            assigned_to_id=manager.id,
            estimated_hours=24,
            actual_hours=18,
            progress_percentage=Decimal("75"),
            due_date=now + timedelta(days=3),
            created_at=now - timedelta(days=10),
        ),
    ]
    return [redesign, mobile, migration], tasks


def _estimate_items(rows: Sequence[Tuple[str, int, int, str]]) -> List[EstimateItem]:
    return [
        EstimateItem(description=d, quantity=Decimal(q), unit_price=Decimal(p), unit=u, sort_order=i)
        for i, (d, q, p, u) in enumerate(rows, start=1)
    ]


def _invoice_items(rows: Sequence[Tuple[str, int, int, str]]) -> List[InvoiceItem]:
    return [
        InvoiceItem(description=d, quantity=Decimal(q), unit_price=Decimal(p), unit=u, sort_order=i)
        for i, (d, q, p, u) in enumerate(rows, start=1)
    ]


def sample_estimates(customers: Sequence[Customer]) -> List[Estimate]:
    if not customers:
        return []
    now = utcnow()
    first_customer = customers[0]
    second_customer = customers[1] if len(customers) > 1 else first_customer
    year = now.year
    return [
        Estimate(
            estimate_number=f"EST-{year}-0001",
            customer_id=first_customer.id,
            title="Website Redesign Project",
            description="Complete redesign of company website with modern UI/UX",
            status=EstimateStatus.SENT,
            created_date=now - timedelta(days=10),
            sent_date=now - timedelta(days=8),
            expiry_date=now + timedelta(days=20),
            tax_rate=Decimal("0.08"),
            terms=FinancialDefaults.DEFAULT_ESTIMATE_TERMS,
            items=_estimate_items(
                [
                    ("UI/UX Design", 40, 125, "hour"),
                    ("Frontend Development", 60, 100, "hour"),
                    ("Backend Integration", 20, 120, "hour"),
                    ("Testing & QA", 16, 80, "hour"),
                ]
            ),
            created_at=now - timedelta(days=10),
        ),
        Estimate(
            estimate_number=f"EST-{year}-0002",
            customer_id=second_customer.id,
            title="Mobile App Development",
            description="Native iOS and Android mobile application",
            status=EstimateStatus.DRAFT,
            created_date=now - timedelta(days=5),
            tax_rate=Decimal("0.10"),
            terms=FinancialDefaults.DEFAULT_ESTIMATE_TERMS,
            items=_estimate_items(
                [
                    ("App Design", 30, 130, "hour"),
                    ("iOS Development", 80, 140, "hour"),
                    ("Android Development", 80, 140, "hour"),
                    ("API Integration", 25, 120, "hour"),
                    ("App Store Deployment", 1, 500, "project"),
                ]
            ),
            created_at=now - timedelta(days=5),
        ),
        Estimate(
            estimate_number=f"EST-{year}-0003",
            customer_id=first_customer.id,
            title="Database Migration",
            description="Migration from legacy system to modern cloud database",
            status=EstimateStatus.ACCEPTED,
            created_date=now - timedelta(days=15),
            sent_date=now - timedelta(days=12),
            accepted_date=now - timedelta(days=3),
            tax_rate=Decimal("0.08"),
            terms=FinancialDefaults.DEFAULT_ESTIMATE_TERMS,
            items=_estimate_items(
                [
                    ("Data Analysis & Planning", 20, 150, "hour"),
                    ("Database Setup", 15, 140, "hour"),
                    ("Data Migration", 35, 130, "hour"),
                    ("Testing & Validation", 20, 120, "hour"),
                ]
            ),
            created_at=now - timedelta(days=15),
        ),
    ]


def sample_invoices(customers: Sequence[Customer]) -> List[Invoice]:
    if not customers:
        return []
    now = utcnow()
    first_customer = customers[0]
    second_customer = customers[1] if len(customers) > 1 else first_customer
    year = now.year
    maintenance = Invoice(
        invoice_number=f"INV-{year}-0001",
        customer_id=first_customer.id,
        title="Website Maintenance - Q4",
        description="Quarterly website maintenance and updates",
        status=InvoiceStatus.PAID,
        created_date=now - timedelta(days=45),
        sent_date=now - timedelta(days=43),
        due_date=now - timedelta(days=13),
        paid_date=now - timedelta(days=10),
        tax_rate=Decimal("0.08"),
        terms=FinancialDefaults.DEFAULT_TERMS,
        items=_invoice_items(
            [
                ("Content Updates", 8, 100, "hour"),
                ("Security Updates", 4, 120, "hour"),
                ("Performance Optimization", 6, 130, "hour"),
                ("Backup & Monitoring", 1, 200, "month"),
            ]
        ),
        created_at=now - timedelta(days=45),
    )
    maintenance.amount_paid = maintenance.total
    return [
        maintenance,
        Invoice(
            invoice_number=f"INV-{year}-0002",
            customer_id=second_customer.id,
            title="E-commerce Integration",
            description="Payment gateway and inventory system integration",
            status=InvoiceStatus.SENT,
            created_date=now - timedelta(days=20),
            sent_date=now - timedelta(days=18),
            due_date=now + timedelta(days=12),
            tax_rate=Decimal("0.10"),
            terms=FinancialDefaults.DEFAULT_TERMS,
            items=_invoice_items(
                [
                    ("Payment Gateway Setup", 12, 150, "hour"),
                    ("Inventory System Integration", 20, 140, "hour"),
                    ("Testing & Documentation", 8, 100, "hour"),
                ]
            ),
            created_at=now - timedelta(days=20),
        ),
        Invoice(
            invoice_number=f"INV-{year}-0003",
            customer_id=first_customer.id,
            title="Emergency Bug Fixes",
            description="Critical bug fixes for production system",
            status=InvoiceStatus.OVERDUE,
            created_date=now - timedelta(days=50),
            sent_date=now - timedelta(days=48),
            due_date=now - timedelta(days=18),
            tax_rate=Decimal("0.08"),
            terms=FinancialDefaults.DEFAULT_TERMS,
            items=_invoice_items(
                [
                    ("Emergency Response", 6, 200, "hour"),
                    ("Bug Investigation", 4, 150, "hour"),
                    ("Code Fixes", 8, 140, "hour"),
                    ("Testing & Deployment", 3, 120, "hour"),
                ]
            ),
            created_at=now - timedelta(days=50),
        ),
    ]
