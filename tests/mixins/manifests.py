STATIC_TEMPLATE_MPD = r'''<?xml version="1.0" encoding="UTF-8"?>
<MPD xmlns="urn:mpeg:dash:schema:mpd:2011" type="static"
     mediaPresentationDuration="PT8S" minBufferTime="PT2S">
  <Period id="p0">
    <AdaptationSet mimeType="video/mp4">
      <SegmentTemplate timescale="1" duration="2" startNumber="1"
                       initialization="$RepresentationID$/init.mp4"
                       media="$RepresentationID$/$Number%03d$.m4s"/>
      <Representation id="v1" bandwidth="500000"/>
      <Representation id="v2" bandwidth="1000000"/>
    </AdaptationSet>
  </Period>
</MPD>
'''

STATIC_TIMELINE_MPD = r'''<?xml version="1.0" encoding="UTF-8"?>
<MPD type="static">
  <Period duration="PT7S">
    <AdaptationSet>
      <Representation id="a1" bandwidth="96000">
        <SegmentTemplate timescale="1000" initialization="$RepresentationID$/init.mp4"
                         media="$RepresentationID$/$Time$.m4s">
          <SegmentTimeline>
            <S t="0" d="2000" r="2"/>
            <S d="1000"/>
          </SegmentTimeline>
        </SegmentTemplate>
      </Representation>
    </AdaptationSet>
  </Period>
</MPD>
'''

SEGMENT_LIST_MPD = r'''<?xml version="1.0" encoding="UTF-8"?>
<MPD xmlns="urn:mpeg:dash:schema:mpd:2011" type="static" mediaPresentationDuration="PT4S">
  <BaseURL>http://cdn.example.test/vod/</BaseURL>
  <Period>
    <AdaptationSet>
      <Representation id="v1" bandwidth="200000">
        <SegmentList timescale="1" duration="2">
          <Initialization sourceURL="init.mp4"/>
          <SegmentURL media="a.m4s"/>
          <SegmentURL media="b.m4s"/>
        </SegmentList>
      </Representation>
      <Representation id="v2" bandwidth="200000">
        <BaseURL>single/video.mp4</BaseURL>
        <SegmentBase indexRange="0-999"/>
      </Representation>
    </AdaptationSet>
  </Period>
</MPD>
'''

LIVE_TEMPLATE_MPD = r'''<?xml version="1.0" encoding="UTF-8"?>
<MPD xmlns="urn:mpeg:dash:schema:mpd:2011" type="dynamic"
     availabilityStartTime="2023-12-31T23:59:00Z" minimumUpdatePeriod="PT2S"
     timeShiftBufferDepth="PT20S">
  <Period start="PT0S">
    <AdaptationSet>
      <SegmentTemplate timescale="1" duration="4" startNumber="1"
                       media="live_$Number$.m4s"/>
      <Representation id="v1" bandwidth="500000"/>
    </AdaptationSet>
  </Period>
</MPD>
'''

LIVE_TIMELINE_MPD = r'''<?xml version="1.0" encoding="UTF-8"?>
<MPD type="dynamic" availabilityStartTime="2023-12-31T23:59:50Z">
  <Period start="PT0S">
    <AdaptationSet>
      <SegmentTemplate timescale="1" media="$Time$.m4s">
        <SegmentTimeline>
          <S t="0" d="2" r="-1"/>
        </SegmentTimeline>
      </SegmentTemplate>
      <Representation id="v1" bandwidth="500000"/>
    </AdaptationSet>
  </Period>
</MPD>
'''

PUBLISH_TIME_MPD = r'''<?xml version="1.0" encoding="UTF-8"?>
<MPD type="dynamic" publishTime="2024-01-01T00:00:05Z">
  <Period start="PT0S">
    <AdaptationSet>
      <SegmentTemplate timescale="1" duration="4" media="$Number$.m4s"/>
      <Representation id="v1" bandwidth="500000"/>
    </AdaptationSet>
  </Period>
</MPD>
'''


STALE_LIVE_MPD = r'''<?xml version="1.0" encoding="UTF-8"?>
<MPD type="dynamic" availabilityStartTime="2023-12-31T23:50:00Z" minimumUpdatePeriod="PT3S">
  <Period start="PT0S">
    <AdaptationSet>
      <SegmentTemplate timescale="1" media="$Time$.m4s">
        <SegmentTimeline>
          <S t="0" d="2" r="4"/>
        </SegmentTimeline>
      </SegmentTemplate>
      <Representation id="v1" bandwidth="500000"/>
    </AdaptationSet>
  </Period>
</MPD>
'''
