from rest_framework import serializers

from task import workflow
from task.models import Task, TaskComment, TaskDiscussionMessage
from utils.exceptions import ValidationFailed


class TaskCommentSerializer(serializers.ModelSerializer):
    class Meta:
        model = TaskComment
        fields = ('id', 'text', 'author', 'created_at')
        read_only_fields = ('author', 'created_at')

    def validate_text(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Comment cannot be empty.')
        return value


class TaskSerializer(serializers.ModelSerializer):
    comments = TaskCommentSerializer(many=True, read_only=True)
    project_title = serializers.CharField(source='project.title', read_only=True)
    room = serializers.IntegerField(source='project.room_id', read_only=True)
    status_bucket = serializers.SerializerMethodField()
    is_overdue = serializers.SerializerMethodField()

    class Meta:
        model = Task
        fields = ('id', 'project', 'project_title', 'room', 'title', 'description',
                  'due_date', 'priority', 'status', 'status_bucket', 'assigned_to',
                  'is_overdue', 'created_at', 'updated_at', 'comments')

    def get_status_bucket(self, obj):
        return workflow.bucket_status(obj.status)

    def get_is_overdue(self, obj):
        return workflow.is_overdue(obj, self.context.get('today'))


class TaskWriteSerializer(serializers.ModelSerializer):
    """
    Create and edit payload. Status and assignee have their own actions on
    edit; on create the assignee is required and status always starts at
    Not Started.
    """
    priority = serializers.CharField(required=False, allow_blank=True)
    assigned_to = serializers.CharField(required=False, allow_blank=True)

    class Meta:
        model = Task
        fields = ('project', 'title', 'description', 'due_date', 'priority', 'assigned_to')
        extra_kwargs = {'description': {'required': False}}

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Task title is required.')
        return value

    def validate_priority(self, value):
        try:
            return workflow.normalize_priority(value)
        except ValidationFailed as e:
            raise serializers.ValidationError(e.message)

    def validate_assigned_to(self, value):
        return value.strip().lower()

    def validate(self, attrs):
        if self.instance is None and not attrs.get('assigned_to'):
            raise serializers.ValidationError({'assigned_to': 'Please assign the task to a member.'})
        if self.instance is not None:
            attrs.pop('project', None)
            attrs.pop('assigned_to', None)
        return attrs


class TaskAssignSerializer(serializers.Serializer):
    assigned_to = serializers.CharField(allow_blank=True)

    def validate_assigned_to(self, value):
        value = value.strip().lower()
        if not value:
            raise serializers.ValidationError('Please choose a member to assign.')
        return value


class TaskStatusSerializer(serializers.Serializer):
    status = serializers.CharField(allow_blank=True)


class TaskDiscussionMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = TaskDiscussionMessage
        fields = ('id', 'room', 'task', 'text', 'user', 'timestamp')
        read_only_fields = ('room', 'task', 'user', 'timestamp')

    def validate_text(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Message cannot be empty.')
        return value
