from django.contrib import admin
from django_summernote.admin import SummernoteModelAdmin

from task.models import Task, TaskComment, TaskDiscussionMessage


class TaskCommentInline(admin.TabularInline):
    model = TaskComment
    extra = 0
    readonly_fields = ('created_at',)


@admin.register(Task)
class TaskAdmin(SummernoteModelAdmin):
    list_display = ('title', 'project', 'status', 'priority', 'assigned_to', 'due_date')
    list_filter = ('status', 'priority')
    search_fields = ('title', 'description', 'assigned_to')
    inlines = [TaskCommentInline]
    summernote_fields = ('description',)


@admin.register(TaskDiscussionMessage)
class TaskDiscussionMessageAdmin(admin.ModelAdmin):
    list_display = ('task', 'user', 'timestamp')
    search_fields = ('text', 'user')
