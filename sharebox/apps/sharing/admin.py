"""Django admin configuration for sharing app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from sharebox.apps.sharing.models import ShareRecord


@admin.register(ShareRecord)
class ShareRecordAdmin(admin.ModelAdmin):
    """Admin interface for ShareRecord model.

    Shares are immutable, so every field is read-only here; admins may
    only inspect and delete them.
    """

    list_display = [
        'id',
        'owner',
        'share_type',
        'file_count',
        'is_protected',
        'created_at',
    ]

    list_filter = [
        'share_type',
        'created_at',
    ]

    search_fields = [
        'id',
        'owner__username',
    ]

    readonly_fields = [
        'id',
        'owner',
        'share_type',
        'files',
        'recipients',
        'created_at',
        'updated_at',
    ]

    exclude = ['password']

    def file_count(self, obj: ShareRecord) -> int:
        """Number of shared paths.

        Args:
            obj: ShareRecord instance.

        Returns:
            Length of the files list.
        """
        return len(obj.files)
    file_count.short_description = 'Files'  # type: ignore[attr-defined]

    @admin.display(boolean=True, description='Password')
    def is_protected(self, obj: ShareRecord) -> bool:
        """Whether the share requires a password."""
        return obj.has_password

    def has_add_permission(self, request: HttpRequest) -> bool:
        """Shares are created through the API only."""
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet[ShareRecord]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('owner')
