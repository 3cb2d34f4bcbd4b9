from hubwire import CompletionMessage, JSONHubProtocol, MessageBuilder, MessageReader

def main():
    # Encodes an invocation and decodes what a hub might answer, split across two reads
    protocol = JSONHubProtocol()

    call = MessageBuilder().invoke("Send", "alice", "hello").id("1").build()
    print("OUT:", protocol.write_message(call))

    reader = MessageReader(protocol)
    reply = b'{"type":2,"invocationId":"1","item":"hel'
    print("IN (partial):", reader.feed(reply), "pending:", reader.pending)

    rest = b'lo"}\x1e{"type":3,"invocationId":"1","result":42}\x1e'
    for msg in reader.feed(rest):
        if isinstance(msg, CompletionMessage):
            print("COMPLETION:", msg.result if msg.has_result else msg.error)
        else:
            print("MESSAGE:", msg)

if __name__ == "__main__":
    main()
