from rest_framework import serializers
from project.models import Project, ProjectMembers
from project.permission import project_role, is_project_leader
from room.adapters.serializers.room_serializer import normalize_member_entry


class ProjectMemberSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProjectMembers
        fields = ('email', 'status', 'joined_at')


class ProjectSerializer(serializers.ModelSerializer):
    members = ProjectMemberSerializer(many=True, read_only=True)
    my_role = serializers.SerializerMethodField()
    is_leader = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = ('id', 'room', 'title', 'description', 'creator_email', 'role',
                  'created_at', 'members', 'my_role', 'is_leader')

    def get_my_role(self, obj):
        return project_role(obj, self.context.get('identity'))

    def get_is_leader(self, obj):
        return is_project_leader(obj, self.context.get('identity'))


class ProjectWriteSerializer(serializers.ModelSerializer):
    members = serializers.ListField(
        child=serializers.JSONField(),
        required=False,
        allow_empty=True
    )

    class Meta:
        model = Project
        fields = (
            'room',
            'title',
            'description',
            'role',
            'members',
        )

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Project title cannot be empty.')
        return value

    def validate_members(self, value):
        """
        Validate and normalize members.
        Accepts both formats:
        - legacy: ["a@x.com", ...] (bare identity, stored as pending)
        - current: [{"email": "a@x.com", "status": "pending"}, ...]

        New members always enter as pending; only the leader can promote them
        afterwards, so any other requested status is ignored here.
        """
        normalized = {}
        for item in value or []:
            entry = normalize_member_entry(item, ProjectMembers.Status.values, ProjectMembers.Status.PENDING)
            entry['status'] = ProjectMembers.Status.PENDING
            normalized[entry['email']] = entry
        return list(normalized.values())

    def create(self, validated_data):
        members_data = validated_data.pop('members', [])
        project = Project.objects.create(**validated_data)

        ProjectMembers.objects.create(
            project=project,
            email=project.creator_email,
            status=ProjectMembers.Status.APPROVED,
        )
        for member_data in members_data:
            if member_data['email'] != project.creator_email:
                ProjectMembers.objects.create(project=project, **member_data)

        return project


class ProjectMemberEmailSerializer(serializers.Serializer):
    email = serializers.CharField(allow_blank=True)

    def validate_email(self, value):
        if not value.strip():
            raise serializers.ValidationError('Please enter a valid email.')
        return normalize_member_entry(value, ProjectMembers.Status.values, ProjectMembers.Status.PENDING)['email']


class ProjectMemberStatusSerializer(ProjectMemberEmailSerializer):
    status = serializers.ChoiceField(choices=ProjectMembers.Status.choices)
