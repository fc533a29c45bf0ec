# Inbound (client -> server)
EVENT_JOIN_ROOM = "joinRoom"
EVENT_LEAVE_ROOM = "leaveRoom"
EVENT_CHAT_MESSAGE = "chat:message"

# Outbound (server -> client)
EVENT_USERS_ONLINE = "usersOnline"  # list of {socketId, userId}, global or per room
# chat:message is relayed under the same name it arrives with

# **usersOnline payloads**
# - on connect/disconnect: every connection, `userId` = ""
# - on joinRoom/leaveRoom/disconnect-from-room: members of that room only, in join order
