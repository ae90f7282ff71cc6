from django.contrib import admin
from django_summernote.admin import SummernoteModelAdmin

from project.models import Project, ProjectMembers


class ProjectMembersInline(admin.TabularInline):
    model = ProjectMembers
    extra = 1


@admin.register(Project)
class ProjectAdmin(SummernoteModelAdmin):
    list_display = ('title', 'room', 'creator_email', 'role', 'created_at')
    search_fields = ('title', 'description', 'creator_email')
    list_filter = ('role',)
    inlines = [ProjectMembersInline]
    summernote_fields = ('description',)
