from rest_framework import serializers
from room.models import Room, RoomMember


def normalize_member_entry(item, allowed_statuses, default_status):
    """
    Accept both stored member shapes and return {"email", "status"}:
    - legacy form: "a@x.com" (bare identity)
    - current form: {"email": "a@x.com", "status": "approved"}
    """
    if isinstance(item, str):
        email, member_status = item, default_status
    elif isinstance(item, dict):
        email = item.get('email')
        member_status = item.get('status') or default_status
        if not isinstance(email, str):
            raise serializers.ValidationError("Each member must have an 'email' field")
    else:
        raise serializers.ValidationError("Members must be either email strings or objects with 'email' and 'status' fields")

    email = email.strip().lower()
    if not email:
        raise serializers.ValidationError("Member email cannot be empty.")
    try:
        serializers.EmailField().run_validation(email)
    except serializers.ValidationError:
        raise serializers.ValidationError(f"{email} is not a valid email address")
    if member_status not in allowed_statuses:
        raise serializers.ValidationError(f"Unknown member status '{member_status}'")
    return {'email': email, 'status': member_status}


class RoomMemberSerializer(serializers.ModelSerializer):
    class Meta:
        model = RoomMember
        fields = ('email', 'status')


class RoomSerializer(serializers.ModelSerializer):
    members = RoomMemberSerializer(many=True, read_only=True)
    is_owner = serializers.SerializerMethodField()

    class Meta:
        model = Room
        fields = ('id', 'name', 'created_by', 'created_at', 'members', 'is_owner')

    def get_is_owner(self, obj):
        return obj.created_by == self.context.get('identity')


class RoomWriteSerializer(serializers.ModelSerializer):
    members = serializers.ListField(
        child=serializers.JSONField(),
        required=False,
        allow_empty=True
    )

    class Meta:
        model = Room
        fields = ('name', 'members')

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Room name cannot be empty')
        return value

    def validate_members(self, value):
        normalized = {}
        for item in value or []:
            entry = normalize_member_entry(item, RoomMember.Status.values, RoomMember.Status.APPROVED)
            normalized[entry['email']] = entry
        return list(normalized.values())

    def create(self, validated_data):
        members_data = validated_data.pop('members', [])
        creator = validated_data['created_by']
        room = Room.objects.create(**validated_data)

        RoomMember.objects.create(room=room, email=creator)
        for member_data in members_data:
            if member_data['email'] != creator:
                RoomMember.objects.create(room=room, **member_data)

        return room

    def update(self, instance, validated_data):
        # Membership changes go through the owner invite action only.
        validated_data.pop('members', None)
        return super().update(instance, validated_data)


class AddRoomMemberSerializer(serializers.Serializer):
    email = serializers.CharField(allow_blank=True)

    def validate_email(self, value):
        if not value.strip():
            raise serializers.ValidationError('Member email cannot be empty.')
        return normalize_member_entry(value, RoomMember.Status.values, RoomMember.Status.APPROVED)['email']
