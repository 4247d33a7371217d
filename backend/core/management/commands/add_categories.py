"""
Management command to add predefined pharmacy categories to the database
"""
from django.core.management.base import BaseCommand
from django.db import transaction
from backend.catalog.models import Category, Product


class Command(BaseCommand):
    help = "Adds predefined pharmacy product categories to the database"

    categories = [
        'Analgesics',
        'Antibiotics',
        'Antihistamines',
        'Antiseptics',
        'Cough and Cold',
        'Dermatology',
        'Digestive Health',
        'First Aid',
        'Personal Care',
        'Vitamins and Supplements',
    ]

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear all existing categories (and their products) before adding new ones',
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("=" * 60))
        self.stdout.write(self.style.SUCCESS("ADDING PRODUCT CATEGORIES"))
        self.stdout.write(self.style.SUCCESS("=" * 60))

        if options['clear']:
            self.stdout.write(self.style.WARNING("Clearing all existing categories..."))
            with transaction.atomic():
                # Products protect their category, so they go first
                Product.objects.all().delete()
                Category.objects.all().delete()
            self.stdout.write(self.style.SUCCESS("All categories cleared."))

        created_count = 0
        skipped_count = 0

        for category_name in self.categories:
            category_name = category_name.strip()
            if not category_name:
                continue

            _, created = Category.objects.get_or_create(name=category_name)
            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f"  Created: {category_name}"))
            else:
                skipped_count += 1
                self.stdout.write(self.style.WARNING(f"  Skipped (already exists): {category_name}"))

        self.stdout.write(self.style.SUCCESS("=" * 60))
        self.stdout.write(f"Categories Created: {created_count}")
        self.stdout.write(f"Categories Skipped (already exist): {skipped_count}")
        self.stdout.write(f"Total Categories in Database: {Category.objects.count()}")
