# accounting/management/commands/seed_system_ledgers.py

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounting.models.ledger_account import LedgerAccount
from accounting.services.account_resolver import SYSTEM_LEDGERS, ensure_system_ledgers
from companies.models import Company


class Command(BaseCommand):
    help = "Seed the system ledgers (Sales, GST outputs, COGS, Inventory, Cash, Bank, Round Off)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--company",
            dest="company_id",
            help="Seed a single company (defaults to every company)",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        company_id = options.get("company_id")

        if company_id:
            companies = list(Company.objects.filter(pk=company_id))
            if not companies:
                raise CommandError(f"Company {company_id} not found")
        else:
            companies = list(Company.objects.all())

        if not companies:
            self.stdout.write("No companies to seed.")
            return

        names = [definition.name for definition in SYSTEM_LEDGERS.values()]

        for company in companies:
            before = LedgerAccount.objects.filter(company=company, name__in=names).count()
            ensure_system_ledgers(company)
            created = len(names) - before

            self.stdout.write(
                self.style.SUCCESS(
                    f"✔ {company.name}: system ledgers seeded ({created} new, {before} existing)."
                )
            )
