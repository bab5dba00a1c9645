from django.core.management.base import BaseCommand
from django.utils import timezone
from channels.layers import get_channel_layer
from asgiref.sync import async_to_sync

from clinic.realtime.consumers import UpdatesConsumer
from clinic.services.dashboard import SUMMARY_CACHE_KEY, cached_summary


class Command(BaseCommand):
    help = "Rebuild the cached dashboard summary; broadcast WebSocket refresh event."

    def handle(self, *args, **options):
        now = timezone.now()
        summary = cached_summary(refresh=True)

        channel_layer = get_channel_layer()
        if channel_layer is not None:
            event = {"type": "broadcast.refresh", "version": int(now.timestamp()), "ts": now.isoformat(),
                     "keys": [SUMMARY_CACHE_KEY]}
            async_to_sync(channel_layer.group_send)(UpdatesConsumer.GROUP, event)

        self.stdout.write(self.style.SUCCESS(
            f"Dashboard refreshed at {now}: {summary['totalPatients']} patients, "
            f"{summary['totalAppointments']} appointments"
        ))
