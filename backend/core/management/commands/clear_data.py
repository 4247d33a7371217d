"""
Management command to clear Products and Categories from database
Usage: python manage.py clear_data
"""
from django.core.management.base import BaseCommand
from django.db import transaction
from backend.catalog.models import Category, Product


class Command(BaseCommand):
    help = 'Clear all Products and Categories from database'

    def add_arguments(self, parser):
        parser.add_argument(
            '--confirm',
            action='store_true',
            help='Skip confirmation prompt',
        )

    def handle(self, *args, **options):
        if not options['confirm']:
            self.stdout.write(self.style.WARNING('WARNING: This will delete ALL:'))
            self.stdout.write('  - Products')
            self.stdout.write('  - Categories')
            self.stdout.write('')

            confirm = input('Type "YES" to confirm: ')
            if confirm != 'YES':
                self.stdout.write(self.style.ERROR('Operation cancelled.'))
                return

        self.stdout.write('Starting data cleanup...')

        with transaction.atomic():
            product_count = Product.objects.count()
            category_count = Category.objects.count()
            self.stdout.write(f'\nFound:')
            self.stdout.write(f'  - Products: {product_count}')
            self.stdout.write(f'  - Categories: {category_count}')
            self.stdout.write('')

            # Products first: categories are protected while referenced
            self.stdout.write('Deleting Products...')
            Product.objects.all().delete()
            self.stdout.write(self.style.SUCCESS('  Products deleted'))

            self.stdout.write('Deleting Categories...')
            Category.objects.all().delete()
            self.stdout.write(self.style.SUCCESS('  Categories deleted'))

        self.stdout.write(self.style.SUCCESS('\nData cleanup completed successfully.'))
